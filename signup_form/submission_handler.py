"""
Submission handler for the signup form.
Runs the schema engine on a raw record and renders the output panel.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from .form_data_collector import collect_raw_record
from .models import NormalizedRecord
from .schema_engine import RecordSchema, ValidationResult, build_signup_schema
from .session_manager import FormSessionManager
from .tech_collection import TechCollection

logger = logging.getLogger(__name__)


def build_output_payload(record: NormalizedRecord) -> Dict[str, Any]:
    """
    JSON-safe view of a normalized record.
    The avatar is shown by name, size and type; its content is never read.
    """
    payload = record.model_dump(by_alias=True)
    avatar = payload.pop('avatar')
    payload = {
        'avatar': {
            'name': avatar.get('name'),
            'size': avatar.get('size'),
            'type': avatar.get('content_type'),
        },
        **payload,
    }
    payload['techs'] = list(payload['techs'])
    return payload


def format_output(record: NormalizedRecord) -> str:
    return json.dumps(build_output_payload(record), indent=2, ensure_ascii=False)


class SubmissionHandler:
    """Handles the submit action of the signup form."""

    @staticmethod
    def validate_and_submit(
        raw: Dict[str, Any],
        schema: Optional[RecordSchema] = None,
    ) -> Tuple[bool, ValidationResult]:
        """
        Validate a raw candidate record.

        Args:
            raw: Raw candidate record
            schema: Schema to validate against (signup schema when None)

        Returns:
            Tuple of (success, validation result)
        """
        if schema is None:
            schema = build_signup_schema()

        result = schema.validate(raw)

        if not result.is_valid:
            logger.warning(f"Submission rejected: {len(result.errors)} errors "
                           f"({', '.join(error.dotted_path for error in result.errors)})")
            return False, result

        logger.info(f"Submission accepted with {len(result.record.techs)} techs")
        return True, result

    @staticmethod
    def handle_streamlit_submission(
        schema: Optional[RecordSchema] = None,
        collection: Optional[TechCollection] = None,
    ) -> bool:
        """
        Collect the live form state, validate it and store errors or output
        in the session.

        Returns:
            True if the record was valid
        """
        raw = collect_raw_record(collection)
        success, result = SubmissionHandler.validate_and_submit(raw, schema)

        FormSessionManager.set_validation_errors(result.errors)
        if success:
            FormSessionManager.set_output(format_output(result.record))
        return success


def validate_and_submit_data(raw: Dict[str, Any], schema: Optional[RecordSchema] = None) -> Tuple[bool, ValidationResult]:
    """Convenience function for validation and submission."""
    return SubmissionHandler.validate_and_submit(raw, schema)


def handle_streamlit_submission(schema: Optional[RecordSchema] = None) -> bool:
    """Convenience function for Streamlit submission handling."""
    return SubmissionHandler.handle_streamlit_submission(schema)
