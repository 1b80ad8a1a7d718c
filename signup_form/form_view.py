"""
Streamlit rendering of the signup form.
Inputs bind to versioned session keys; tech rows bind to stable ids.
"""

import streamlit as st
import logging
from typing import Dict, List, Optional

from .error_handler import errors_by_path
from .models import ValidationSettings
from .password_strength import is_password_strong, strength_label
from .schema_engine import RecordSchema
from .session_manager import FormSessionManager
from .submission_handler import SubmissionHandler
from .tech_collection import TechCollection

logger = logging.getLogger(__name__)


def render_field_error(messages: Dict[str, List[str]], path: str) -> None:
    """Show the first message reported for path under its input."""
    field_messages = messages.get(path)
    if field_messages:
        st.caption(f":red[{field_messages[0]}]")


def render_password_strength(password: Optional[str]) -> None:
    colour = "green" if is_password_strong(password) else "red"
    st.caption(f":{colour}[{strength_label(password)}]")


def _prefill(key: str, value) -> None:
    if key not in st.session_state:
        st.session_state[key] = "" if value is None else str(value)


def render_techs(collection: TechCollection, messages: Dict[str, List[str]]) -> None:
    """Render one row per tech entry plus the add button."""
    header, add_column = st.columns([4, 1])
    header.markdown("**Techs**")
    add_column.button("Add new ➕", key="techs_add", on_click=collection.append)

    for position, entry in enumerate(collection.current_entries()):
        title_key = collection.widget_key(entry.stable_id, 'title')
        knowledge_key = collection.widget_key(entry.stable_id, 'knowledge')
        _prefill(title_key, entry.title)
        _prefill(knowledge_key, entry.knowledge)

        title_column, knowledge_column, remove_column = st.columns([3, 2, 1])
        with title_column:
            st.text_input("Name", key=title_key, placeholder="Name", label_visibility="collapsed")
            render_field_error(messages, collection.field_path(position, 'title'))
        with knowledge_column:
            st.text_input("Knowledge", key=knowledge_key, placeholder="0-100", label_visibility="collapsed")
            render_field_error(messages, collection.field_path(position, 'knowledge'))
        with remove_column:
            st.button("✖", key=f"techs_remove_{entry.stable_id}",
                      on_click=collection.remove_at, args=(position,))

    render_field_error(messages, collection.key)


def render_signup_form(schema: RecordSchema, settings: ValidationSettings) -> None:
    """Render every input, the submit button and the output panel."""
    messages = errors_by_path(FormSessionManager.get_validation_errors())
    collection = FormSessionManager.get_collection()

    st.file_uploader(
        f"Avatar (max size {settings.max_avatar_label})",
        type=["png", "jpg", "jpeg", "gif", "webp"],
        key=FormSessionManager.widget_key('avatar'),
    )
    render_field_error(messages, 'avatar')

    st.text_input("Name", key=FormSessionManager.widget_key('name'), placeholder="Name")
    render_field_error(messages, 'name')

    st.text_input("E-mail", key=FormSessionManager.widget_key('email'), placeholder="E-mail")
    render_field_error(messages, 'email')

    password_key = FormSessionManager.widget_key('password')
    st.text_input("Password", key=password_key, type="password", placeholder="Password")
    render_password_strength(st.session_state.get(password_key))
    render_field_error(messages, 'password')

    st.text_input("Confirm password", key=FormSessionManager.widget_key('confirmPassword'),
                  type="password", placeholder="Confirm password")
    render_field_error(messages, 'confirmPassword')

    render_techs(collection, messages)

    if st.button("Save", type="primary"):
        SubmissionHandler.handle_streamlit_submission(schema, collection)
        st.rerun()

    output = FormSessionManager.get_output()
    if output:
        st.code(output, language="json")
