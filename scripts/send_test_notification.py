"""
Send a test SMS and email through the configured providers

Run this script to verify SMS_PROVIDER / EMAIL_PROVIDER credentials
before approving real requests.

Usage: python scripts/send_test_notification.py
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from app.core.config import settings
from app.services.notification_service import build_notification_dispatcher
from utils.code_utils import generate_admin_code
from utils.message_utils import build_admin_code_sms
from utils.validation_utils import normalize_phone_number, validate_phone_number


def print_result(label, result):
    if result.success:
        print(f"✅ {label} sent via {result.provider} (id={result.message_id})")
    else:
        print(f"❌ {label} failed via {result.provider}: {result.error}")


async def main():
    print("=" * 60)
    print("  Notification Provider Test")
    print("=" * 60 + "\n")
    print(f"SMS provider:   {settings.SMS_PROVIDER}")
    print(f"Email provider: {settings.EMAIL_PROVIDER}\n")

    dispatcher = build_notification_dispatcher(settings)

    phone = input("Phone number to text (e.g. 9876543210): ").strip()
    if phone:
        if not validate_phone_number(phone):
            print(f"⚠️  {phone} is not a valid Indian mobile; sending anyway")
        print(f"\n📤 Sending test SMS to {normalize_phone_number(phone)}...")
        message = build_admin_code_sms(generate_admin_code(), "Test User", settings.SYSTEM_NAME)
        print_result("SMS", await dispatcher.send_sms(phone, message))

    email = input("\nEmail address (blank to skip): ").strip()
    if email:
        print(f"\n📤 Sending test email to {email}...")
        result = await dispatcher.send_email(
            email,
            f"{settings.SYSTEM_NAME} notification test",
            "If you received this, email delivery is working."
        )
        print_result("Email", result)

    print("\n" + "=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
