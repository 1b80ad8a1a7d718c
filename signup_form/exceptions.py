"""
Custom exception classes for the signup form.

User input problems are never raised: they are reported as FieldError values
by the schema engine. The exceptions here cover configuration problems and
misuse of the tech collection API.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class SignupFormError(Exception):
    """
    Base exception for signup form errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class ConfigurationLoadError(SignupFormError):
    """
    Exception raised when the configuration file cannot be read or parsed.
    """

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if config.yaml exists and is readable",
            "Verify YAML syntax is correct",
            "Application will use default configuration as fallback"
        ]

        super().__init__(message, context, recovery_suggestions)


class ConfigurationError(SignupFormError):
    """
    Exception raised when configuration values are inconsistent,
    e.g. a knowledge minimum above the maximum.
    """

    def __init__(self, section: str, issues: List[str], message: Optional[str] = None):
        self.section = section
        self.issues = issues

        if message is None:
            message = f"Invalid '{section}' configuration: {'; '.join(issues)}"

        context = {
            'section': section,
            'issues': issues
        }

        recovery_suggestions = [
            f"Review the '{section}' section of config.yaml",
            "Remove the section to fall back to the built-in defaults"
        ]

        super().__init__(message, context, recovery_suggestions)


class UnknownEntryError(SignupFormError):
    """
    Exception raised when a tech entry is addressed by a stable id
    that is not part of the collection.
    """

    def __init__(self, stable_id: str, message: Optional[str] = None):
        self.stable_id = stable_id

        if message is None:
            message = f"No tech entry with id '{stable_id}'"

        super().__init__(message, {'stable_id': stable_id}, [
            "Re-render the form so widgets are rebuilt from the current collection"
        ])
