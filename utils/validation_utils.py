"""
utils/validation_utils.py

Purpose: Phone number handling

- Normalizes requester phone numbers into E.164 form for SMS dispatch
- Validates Indian mobile numbers
"""

import re


INDIAN_MOBILE_PATTERN = re.compile(r"^(?:91)?[6-9][0-9]{9}$")


def _digits_only(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone or "")


def normalize_phone_number(phone: str) -> str:
    """
    Best-effort conversion of a phone number to E.164.

    Counts ASCII digits 0-9 only:

    - 10 digits (local Indian number) -> "+91" prefixed
    - 12 digits starting with "91" -> "+" prefixed
    - anything else is returned exactly as given, on the assumption that it
      is already in an acceptable international form

    Never raises.

    Example:
        normalize_phone_number("98765 43210") -> "+919876543210"
        normalize_phone_number("+19876543210") -> "+19876543210"
    """
    cleaned = _digits_only(phone)

    if len(cleaned) == 10:
        return f"+91{cleaned}"
    if len(cleaned) == 12 and cleaned.startswith("91"):
        return f"+{cleaned}"

    return phone


def validate_phone_number(phone: str) -> bool:
    """
    Validates Indian mobile number format.

    Only ASCII digits 0-9 are kept; separators, a leading "+" and digits
    from other scripts are dropped. An optional 91 country code may
    precede the 10-digit number, which must start with 6-9.

    Args:
        phone: Phone number string

    Returns:
        True if valid Indian mobile number
    """
    if not phone:
        return False

    cleaned = _digits_only(phone)
    return bool(
        INDIAN_MOBILE_PATTERN.match(cleaned)
        or INDIAN_MOBILE_PATTERN.match(f"91{cleaned}")
    )
