"""
Format checks for slot IDs and registration numbers.

Formats:
    slot ID       one uppercase letter + 2 digits   (e.g. S01, V12)
    registration  one uppercase letter + 4 digits   (e.g. A1234)

The is_valid_* functions never raise. The validate_* functions raise the
matching ParkingError subclass and return the value unchanged when valid.
"""

from __future__ import annotations

import re
from typing import Any

from carpark.errors import InvalidRegistrationError, InvalidSlotIdError

# re.ASCII keeps \d from matching non-ASCII digits
_SLOT_ID_RE = re.compile(r"[A-Z]\d{2}", re.ASCII)
_REGISTRATION_RE = re.compile(r"[A-Z]\d{4}", re.ASCII)


def _matches(pattern: re.Pattern[str], value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return pattern.fullmatch(value) is not None


def is_valid_slot_id(value: Any) -> bool:
    return _matches(_SLOT_ID_RE, value)


def is_valid_registration(value: Any) -> bool:
    return _matches(_REGISTRATION_RE, value)


def validate_slot_id(value: Any) -> str:
    if not is_valid_slot_id(value):
        raise InvalidSlotIdError(value)
    return value


def validate_registration(value: Any) -> str:
    if not is_valid_registration(value):
        raise InvalidRegistrationError(value)
    return value


def normalize_identifier(value: str) -> str:
    """
    Normalize user input before validation: strip + uppercase.
    """
    return (value or "").strip().upper()
