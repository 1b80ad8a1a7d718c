"""
Password strength indicator shown next to the password label.
Informational only: it never blocks a submission.
"""

import re
from typing import Any

STRONG_PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[^A-Za-z0-9])(?=.{8,})")


def is_password_strong(password: Any) -> bool:
    """True when the password mixes lower, upper, digit and symbol and has 8+ characters."""
    if not isinstance(password, str):
        return False
    return STRONG_PASSWORD_PATTERN.search(password) is not None


def strength_label(password: Any) -> str:
    return "strong password" if is_password_strong(password) else "weak password"
