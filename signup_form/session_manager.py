"""
Session state management for the signup form.
Holds the form version, the last validation errors and the output panel.
"""

import streamlit as st
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from .config_loader import get_config_value
from .schema_engine import FieldError
from .tech_collection import DEFAULT_KNOWLEDGE, TechCollection

logger = logging.getLogger(__name__)

FORM_FIELDS = ('avatar', 'name', 'email', 'password', 'confirmPassword')


class FormSessionManager:
    """Manages Streamlit session state for one signup form session."""

    @staticmethod
    def initialize(initial_techs: int = 0, default_knowledge: Optional[int] = None):
        """
        Initialize session state variables; existing keys are kept.

        Args:
            initial_techs: Number of blank tech rows in a new session
            default_knowledge: Knowledge value of new rows (config value when omitted)
        """
        defaults = {
            'form_version': 0,
            'validation_errors': [],
            'submission_output': "",
            'submission_count': 0,
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if default_knowledge is not None:
            st.session_state['default_knowledge'] = default_knowledge

        if not st.session_state['session_id']:
            st.session_state['session_id'] = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
            collection = FormSessionManager.get_collection()
            for _ in range(initial_techs):
                collection.append()
            logger.info(f"Session initialized: {st.session_state['session_id']}")

    @staticmethod
    def get_form_version() -> int:
        return st.session_state.get('form_version', 0)

    @staticmethod
    def widget_key(field_name: str) -> str:
        """Versioned widget key; a new version gives every input a fresh key."""
        return f"field_{field_name}_v{FormSessionManager.get_form_version()}"

    @staticmethod
    def get_collection() -> TechCollection:
        default_knowledge = st.session_state.get('default_knowledge')
        if default_knowledge is None:
            default_knowledge = get_config_value('validation', 'default_knowledge', DEFAULT_KNOWLEDGE)
        return TechCollection(st.session_state, default_knowledge=default_knowledge)

    @staticmethod
    def get_validation_errors() -> List[FieldError]:
        return st.session_state.get('validation_errors', [])

    @staticmethod
    def set_validation_errors(errors: List[FieldError]):
        st.session_state['validation_errors'] = list(errors)

    @staticmethod
    def clear_validation_errors():
        st.session_state['validation_errors'] = []

    @staticmethod
    def get_output() -> str:
        return st.session_state.get('submission_output', "")

    @staticmethod
    def set_output(output: str):
        st.session_state['submission_output'] = output
        st.session_state['submission_count'] = st.session_state.get('submission_count', 0) + 1

    @staticmethod
    def get_session_id() -> str:
        return st.session_state.get('session_id', 'unknown')

    @staticmethod
    def reset_session(initial_techs: int = 0):
        """
        Start the form over: fresh widget keys, no errors, no output,
        and an emptied tech collection.
        """
        logger.info(f"Resetting session: {FormSessionManager.get_session_id()}")

        version = FormSessionManager.get_form_version()
        for field_name in FORM_FIELDS:
            key = f"field_{field_name}_v{version}"
            if key in st.session_state:
                del st.session_state[key]

        st.session_state['form_version'] = version + 1
        st.session_state['validation_errors'] = []
        st.session_state['submission_output'] = ""

        collection = FormSessionManager.get_collection()
        collection.reset([{} for _ in range(initial_techs)])

    @staticmethod
    def get_session_info() -> Dict[str, Any]:
        """Session summary for debugging."""
        return {
            'session_id': FormSessionManager.get_session_id(),
            'form_version': FormSessionManager.get_form_version(),
            'techs_count': len(FormSessionManager.get_collection()),
            'validation_errors_count': len(FormSessionManager.get_validation_errors()),
            'submission_count': st.session_state.get('submission_count', 0),
            'has_output': bool(FormSessionManager.get_output()),
        }


def init_session(initial_techs: int = 0, default_knowledge: Optional[int] = None):
    """Initialize session state."""
    FormSessionManager.initialize(initial_techs, default_knowledge)


def reset_session(initial_techs: int = 0):
    """Reset session."""
    FormSessionManager.reset_session(initial_techs)


def get_validation_errors() -> List[FieldError]:
    return FormSessionManager.get_validation_errors()
