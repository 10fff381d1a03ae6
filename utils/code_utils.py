"""
utils/code_utils.py

Purpose: One-time admin access codes

- Generates codes of the form ADMIN<timestamp base36><6 random base36 chars>
- Validates the basic shape of a code typed in by a user
"""

import secrets
import string
from utils.time_utils import epoch_millis


ADMIN_CODE_PREFIX = "ADMIN"
ADMIN_CODE_MIN_LENGTH = 10
RANDOM_SUFFIX_LENGTH = 6

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    """Upper-case base-36 encoding of a non-negative integer."""
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_admin_code() -> str:
    """
    Generates a practically-unique admin access code.

    The timestamp part changes every millisecond; the random suffix covers
    codes generated within the same millisecond.

    Returns:
        Code like "ADMINMGX3K9Q1A7F2KD"
    """
    timestamp = to_base36(epoch_millis())
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH))
    return f"{ADMIN_CODE_PREFIX}{timestamp}{suffix}"


def validate_admin_code(code: str) -> bool:
    """
    Checks that a code looks like an admin code.

    Does not check that the code was ever issued.
    """
    if not code:
        return False

    return code.startswith(ADMIN_CODE_PREFIX) and len(code) >= ADMIN_CODE_MIN_LENGTH
