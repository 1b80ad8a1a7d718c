"""
Main Streamlit application for the signup form.
Validates a user signup with avatar, credentials and a dynamic list of techs.
"""

import streamlit as st
import logging

from signup_form.config_loader import load_config, get_config_value, get_validation_settings
from signup_form.error_handler import ErrorHandler, ErrorType
from signup_form.exceptions import ConfigurationError
from signup_form.form_view import render_signup_form
from signup_form.models import ValidationSettings
from signup_form.schema_engine import build_signup_schema
from signup_form.session_manager import FormSessionManager, init_session


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


# Configure logging dynamically from config
log_level_str = get_config_value('logging', 'level', 'INFO')
logging.basicConfig(level=get_logging_level(log_level_str))
logger = logging.getLogger(__name__)
logger.info(f"Logging configured to level: {log_level_str}")

config = load_config()
page_title = get_config_value('ui', 'page_title', 'Create user')
logger.info(f"Starting app version: {get_config_value('app', 'version', 'Unknown')}")

st.set_page_config(
    page_title=page_title,
    page_icon="👤",
    layout="centered",
)


def load_settings() -> ValidationSettings:
    """Validation constants from config, defaults if the section is invalid."""
    try:
        return get_validation_settings(config)
    except ConfigurationError as e:
        ErrorHandler.handle_error(e, "validation settings", ErrorType.CONFIGURATION)
        return ValidationSettings()


def main():
    """Main application entry point."""
    try:
        settings = load_settings()
        schema = build_signup_schema(settings)
        init_session(default_knowledge=settings.default_knowledge)

        st.title(page_title)
        render_signup_form(schema, settings)

        with st.sidebar:
            if st.button("Reset form"):
                FormSessionManager.reset_session()
                st.rerun()
            st.json(FormSessionManager.get_session_info(), expanded=False)

    except Exception as e:
        ErrorHandler.handle_error(e, "signup form", ErrorType.SYSTEM)


if __name__ == "__main__":
    main()
