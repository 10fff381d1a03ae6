"""
utils/constants.py

Purpose: Centralized static content

- Outgoing SMS and email templates for admin code requests
- Subject lines other systems match on
- Status and channel constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# CHANNELS & PROVIDERS
# ============================================================

CHANNEL_SMS = "sms"
CHANNEL_EMAIL = "email"

# ============================================================
# APPROVAL
# ============================================================

ADMIN_CODE_SMS_TEMPLATE = (
    "Hello {name}, Your {system} Admin Access Code is: {code}. "
    "This code is valid for registration. Please keep it secure and do not "
    "share with unauthorized persons. Valid until you use it for registration."
)

APPROVAL_EMAIL_SUBJECT = "Admin Access Request Approved"

APPROVAL_EMAIL_TEMPLATE = """Dear {name},

Your request for admin access to the {system} management system has been approved!

The admin code has been sent to your registered mobile number: {phone}

Please use this code during registration to create your admin account.

Important Notes:
- The code is case-sensitive
- Use it only for your registration
- Do not share this code with others

Contact support if you face any issues.

Best regards,
{system} Admin Team

This is an automated message. Please do not reply to this email."""

# ============================================================
# REJECTION
# ============================================================

REJECTION_EMAIL_SUBJECT = "Admin Access Request - Status Update"

REJECTION_EMAIL_TEMPLATE = """Dear {name},

Thank you for your interest in admin access to the {system} management system.

After careful review, we are unable to approve your request at this time.
{reason_block}
If you believe this is an error or would like to provide additional information, please contact our support team.

Best regards,
{system} Admin Team

This is an automated message. Please do not reply to this email."""

REJECTION_REASON_BLOCK = "\nReason: {reason}\n"

# ============================================================
# MOCK PROVIDERS
# ============================================================

MOCK_SMS_FAILURE_MESSAGE = "Mock SMS service failure"
