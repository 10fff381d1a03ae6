"""
utils/message_utils.py

Purpose: Notification message builders

- Formats the admin code SMS
- Formats approval and rejection emails (subject + body)
"""

from typing import Dict, Optional

from utils.constants import (
    ADMIN_CODE_SMS_TEMPLATE,
    APPROVAL_EMAIL_SUBJECT,
    APPROVAL_EMAIL_TEMPLATE,
    REJECTION_EMAIL_SUBJECT,
    REJECTION_EMAIL_TEMPLATE,
    REJECTION_REASON_BLOCK,
)


def build_admin_code_sms(code: str, name: str, system_name: str) -> str:
    """
    Builds the SMS carrying a freshly issued admin code.

    Args:
        code: Generated admin code
        name: Requester name
        system_name: Platform name shown to the requester

    Returns:
        SMS body
    """
    return ADMIN_CODE_SMS_TEMPLATE.format(name=name, system=system_name, code=code)


def build_approval_email(name: str, phone: str, system_name: str) -> Dict[str, str]:
    """
    Builds the approval email. The code itself only travels by SMS; the
    email tells the requester which number it was sent to.

    Returns:
        {"subject": ..., "message": ...}
    """
    return {
        "subject": APPROVAL_EMAIL_SUBJECT,
        "message": APPROVAL_EMAIL_TEMPLATE.format(name=name, phone=phone, system=system_name),
    }


def build_rejection_email(name: str, system_name: str, reason: Optional[str] = None) -> Dict[str, str]:
    """
    Builds the rejection email. The reason line is left out when no reason
    is given.

    Returns:
        {"subject": ..., "message": ...}
    """
    reason_block = REJECTION_REASON_BLOCK.format(reason=reason) if reason else ""

    return {
        "subject": REJECTION_EMAIL_SUBJECT,
        "message": REJECTION_EMAIL_TEMPLATE.format(
            name=name,
            system=system_name,
            reason_block=reason_block,
        ),
    }
