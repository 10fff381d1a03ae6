"""
app/services/notification_service.py

Purpose: Uniform notification sending over the configured providers

- One SMS provider and one Email provider, chosen at startup
- Phone numbers are normalized before they reach the SMS provider
- Never raises: every provider fault comes back as a failed NotificationResult
"""

from app.core.config import Settings
from app.core.logging import get_logger
from app.schemas.notification import NotificationResult
from app.services.email_service import EmailProvider, build_email_provider
from app.services.sms_service import SmsProvider, build_sms_provider
from utils.constants import CHANNEL_EMAIL, CHANNEL_SMS
from utils.validation_utils import normalize_phone_number

logger = get_logger(__name__)


class NotificationDispatcher:
    """
    Sends SMS and Email through injected providers.

    Callers aggregate results across channels, so a provider blowing up
    must not abort the caller: unexpected exceptions are logged and turned
    into `success=False` results here.
    """

    def __init__(self, sms_provider: SmsProvider, email_provider: EmailProvider):
        self.sms_provider = sms_provider
        self.email_provider = email_provider

    async def send_sms(self, to_phone: str, message: str) -> NotificationResult:
        """
        Sends an SMS after normalizing the recipient number.

        Args:
            to_phone: Phone number as entered by the requester
            message: SMS body

        Returns:
            NotificationResult for the SMS channel
        """
        formatted_phone = normalize_phone_number(to_phone)

        try:
            return await self.sms_provider.send(formatted_phone, message)
        except Exception as e:
            logger.error(
                f"Error sending SMS to {formatted_phone}: {e}",
                extra={"channel": CHANNEL_SMS, "provider": self.sms_provider.name},
                exc_info=True
            )
            return NotificationResult(
                success=False,
                channel=CHANNEL_SMS,
                provider=self.sms_provider.name,
                error=f"Failed to send SMS: {e}",
            )

    async def send_email(self, to: str, subject: str, message: str, is_html: bool = False) -> NotificationResult:
        """
        Sends an email.

        Args:
            to: Recipient address
            subject: Subject line
            message: Body, plain text unless is_html
            is_html: Send the body as text/html

        Returns:
            NotificationResult for the email channel
        """
        try:
            return await self.email_provider.send(to, subject, message, is_html=is_html)
        except Exception as e:
            logger.error(
                f"Error sending email to {to}: {e}",
                extra={"channel": CHANNEL_EMAIL, "provider": self.email_provider.name},
                exc_info=True
            )
            return NotificationResult(
                success=False,
                channel=CHANNEL_EMAIL,
                provider=self.email_provider.name,
                error=f"Failed to send email: {e}",
            )


def build_notification_dispatcher(settings: Settings) -> NotificationDispatcher:
    """
    Builds the dispatcher for the process from configuration.
    """
    dispatcher = NotificationDispatcher(
        sms_provider=build_sms_provider(settings),
        email_provider=build_email_provider(settings),
    )
    logger.info(
        f"Notification providers: sms={dispatcher.sms_provider.name}, "
        f"email={dispatcher.email_provider.name}"
    )
    return dispatcher
