"""Shared utilities used across the allocation service."""

import re
from datetime import datetime, timezone


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("98765 43210")
        '9876543210'
        >>> normalize_phone("+91 (98765) 432-10")
        '+919876543210'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
