"""
utils/time_utils.py

Purpose: Time helpers

- Current UTC time for stored timestamps
- Millisecond epoch for provider message ids
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """
    Milliseconds since the Unix epoch.
    """
    return int(utc_now().timestamp() * 1000)


