"""
Unit tests for error_handler module.
"""

from pathlib import Path
from unittest.mock import patch

from signup_form.error_handler import (
    ErrorHandler,
    ErrorType,
    errors_by_path,
    format_path,
    handle_error,
)
from signup_form.exceptions import ConfigurationError, ConfigurationLoadError, UnknownEntryError
from signup_form.schema_engine import ErrorCode, FieldError


ERRORS = [
    FieldError(("techs",), ErrorCode.TOO_FEW, "Add at least 2 techs"),
    FieldError(("techs", 0, "title"), ErrorCode.REQUIRED, "Title is required"),
    FieldError(("confirmPassword",), ErrorCode.MISMATCH, "Passwords don't match"),
]


def test_format_path():
    assert format_path(("techs", 0, "title")) == "techs.0.title"
    assert format_path(["name"]) == "name"


def test_errors_by_path_keeps_order():
    grouped = errors_by_path(ERRORS + [FieldError(("techs",), ErrorCode.TOO_FEW, "again")])

    assert list(grouped) == ["techs", "techs.0.title", "confirmPassword"]
    assert grouped["techs"] == ["Add at least 2 techs", "again"]


class TestErrorHandler:
    """Test class for error handler."""

    def test_get_user_friendly_message_configuration(self):
        load_error = ConfigurationLoadError(Path("config.yaml"), OSError("denied"))
        message = ErrorHandler._get_user_friendly_message(load_error, ErrorType.CONFIGURATION)
        assert "could not be read" in message

        config_error = ConfigurationError("validation", ["bad"])
        message = ErrorHandler._get_user_friendly_message(config_error, ErrorType.CONFIGURATION)
        assert "inconsistent" in message

    def test_get_user_friendly_message_collection(self):
        message = ErrorHandler._get_user_friendly_message(UnknownEntryError("x"), ErrorType.COLLECTION)
        assert "no longer exists" in message

        message = ErrorHandler._get_user_friendly_message(RuntimeError("boom"), ErrorType.COLLECTION)
        assert "could not be updated" in message

    def test_get_user_friendly_message_unknown_type_falls_back_to_system(self):
        message = ErrorHandler._get_user_friendly_message(RuntimeError("boom"), "unknown")
        assert "System error" in message

    @patch('signup_form.error_handler.st')
    def test_handle_error_shows_message_and_suggestions(self, mock_st):
        error = ConfigurationError("validation", ["knowledge_min above knowledge_max"])

        ErrorHandler.handle_error(error, "settings", ErrorType.CONFIGURATION)

        mock_st.error.assert_called_once()
        assert "inconsistent" in mock_st.error.call_args[0][0]
        mock_st.info.assert_called_once()
        assert "config.yaml" in mock_st.info.call_args[0][0]

    @patch('signup_form.error_handler.st')
    def test_handle_error_custom_message_without_suggestions(self, mock_st):
        ErrorHandler.handle_error(ValueError("x"), "ctx", user_message="Custom")

        mock_st.error.assert_called_once_with("Custom")
        mock_st.info.assert_not_called()

    @patch('signup_form.error_handler.st')
    def test_handle_error_convenience_function(self, mock_st):
        handle_error(RuntimeError("boom"), "ctx")

        assert "System error" in mock_st.error.call_args[0][0]
