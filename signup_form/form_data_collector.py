"""
Form data collection for the signup form.
Builds the raw candidate record from widget state and the tech collection.
"""

import streamlit as st
import logging
from typing import Any, Dict, Optional

from .tech_collection import TechCollection

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ('name', 'email', 'password', 'confirmPassword')


def collect_raw_record(collection: Optional[TechCollection] = None) -> Dict[str, Any]:
    """
    Collect current form values from session state.

    Every widget stores its value in field_{field_name}_v{form_version};
    techs come from the collection's current entries.

    Args:
        collection: Tech collection of the session (built from session state when None)

    Returns:
        Raw candidate record ready for the schema engine
    """
    form_version = st.session_state.get('form_version', 0)
    if collection is None:
        collection = TechCollection(st.session_state)

    logger.debug(f"Collecting form data for form version {form_version}")

    raw: Dict[str, Any] = {'avatar': _read_widget('avatar', form_version)}

    for field_name in SCALAR_FIELDS:
        value = _read_widget(field_name, form_version)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            logger.warning(f"Field {field_name} has non-string value: {type(value)}")
            value = str(value)
        raw[field_name] = value

    collection.sync_from_widgets()
    raw['techs'] = collection.to_raw()

    logger.info(f"Collected form data with {len(raw['techs'])} techs")
    return raw


def _read_widget(field_name: str, form_version: int) -> Any:
    field_key = f"field_{field_name}_v{form_version}"
    if field_key not in st.session_state:
        logger.debug(f"Missing widget value for: {field_name}")
        return None
    return st.session_state[field_key]
