"""
Error handling utilities for the signup form.

Maps validation errors to the inputs that display them and shows
user-friendly messages for unexpected failures.
"""

import streamlit as st
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .exceptions import ConfigurationError, ConfigurationLoadError, SignupFormError, UnknownEntryError
from .schema_engine import FieldError

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    CONFIGURATION = "configuration"
    COLLECTION = "collection"
    VALIDATION = "validation"
    SYSTEM = "system"


def format_path(path: Sequence[Union[str, int]]) -> str:
    """('techs', 0, 'title') -> 'techs.0.title'"""
    return ".".join(str(segment) for segment in path)


def errors_by_path(errors: Iterable[FieldError]) -> Dict[str, List[str]]:
    """
    Group error messages by dotted field path, keeping validation order.

    Args:
        errors: Field errors from one validation pass

    Returns:
        Ordered mapping of path -> messages
    """
    grouped: Dict[str, List[str]] = OrderedDict()
    for error in errors:
        grouped.setdefault(format_path(error.path), []).append(error.message)
    return grouped


class ErrorHandler:
    """Error handling for unexpected failures in the signup form."""

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        error_type: str = ErrorType.SYSTEM,
        user_message: Optional[str] = None,
    ) -> None:
        """
        Log an error and show a user-friendly message.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            error_type: Type of error (from ErrorType constants)
            user_message: Custom user-friendly message
        """
        logger.error(f"Error in {context}: {str(error)}", exc_info=True)

        if not user_message:
            user_message = ErrorHandler._get_user_friendly_message(error, error_type)

        st.error(user_message)

        if isinstance(error, SignupFormError) and error.recovery_suggestions:
            st.info("\n".join(f"• {suggestion}" for suggestion in error.recovery_suggestions))

    @staticmethod
    def _get_user_friendly_message(error: Exception, error_type: str) -> str:
        """Generate user-friendly error messages based on error type."""
        error_messages = {
            ErrorType.CONFIGURATION: {
                ConfigurationLoadError: "⚙️ The configuration file could not be read. Default settings are in use.",
                ConfigurationError: "⚙️ The validation settings are inconsistent. Please check config.yaml.",
                "default": "⚙️ Configuration error occurred. Please check config.yaml."
            },

            ErrorType.COLLECTION: {
                UnknownEntryError: "🔄 That tech entry no longer exists. The form has been refreshed.",
                "default": "🔄 The tech list could not be updated. Please try again."
            },

            ErrorType.VALIDATION: {
                "default": "✅ Validation error occurred. Please review your data and try again."
            },

            ErrorType.SYSTEM: {
                "default": "💻 System error occurred. Please try again or contact support."
            }
        }

        error_type_messages = error_messages.get(error_type, error_messages[ErrorType.SYSTEM])

        for exception_type, message in error_type_messages.items():
            if exception_type != "default" and isinstance(error, exception_type):
                return message

        return error_type_messages.get("default", "An unexpected error occurred.")


def handle_error(error: Exception, context: str, error_type: str = ErrorType.SYSTEM) -> None:
    """Convenience wrapper around ErrorHandler.handle_error."""
    ErrorHandler.handle_error(error, context, error_type)
