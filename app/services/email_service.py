"""
app/services/email_service.py

Purpose: Email providers

- MockEmailProvider: logs the email, simulates latency, always succeeds
- SendGridEmailProvider: sends through the SendGrid v3 mail API
"""

import asyncio
from typing import Optional, Protocol

import httpx

from app.core.config import Settings
from app.core.logging import get_logger
from app.schemas.notification import NotificationResult
from utils.constants import CHANNEL_EMAIL
from utils.time_utils import epoch_millis

logger = get_logger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailProvider(Protocol):
    name: str

    async def send(self, to: str, subject: str, message: str, is_html: bool = False) -> NotificationResult:
        ...


class MockEmailProvider:
    """
    Development provider. Unlike the mock SMS provider it never fails.
    """

    name = "mock"

    def __init__(self, delay_seconds: float = 0.8):
        self.delay_seconds = delay_seconds

    async def send(self, to: str, subject: str, message: str, is_html: bool = False) -> NotificationResult:
        logger.info(
            f"📧 MOCK EMAIL to {to} | subject={subject!r} | content_type={'HTML' if is_html else 'Text'}",
            extra={"channel": CHANNEL_EMAIL, "provider": self.name}
        )
        logger.debug(message)

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        return NotificationResult(
            success=True,
            channel=CHANNEL_EMAIL,
            provider=self.name,
            message_id=f"email-mock-{epoch_millis()}",
        )


class SendGridEmailProvider:
    """Sends transactional email via SendGrid."""

    name = "sendgrid"

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: Optional[str] = None,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridEmailProvider":
        return cls(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.FROM_EMAIL,
            from_name=settings.FROM_NAME,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )

    def _build_payload(self, to: str, subject: str, message: str, is_html: bool) -> dict:
        payload = {
            "personalizations": [{"to": [{"email": to}], "subject": subject}],
            "from": {"email": self.from_email},
            "content": [{"type": "text/html" if is_html else "text/plain", "value": message}],
        }
        if self.from_name:
            payload["from"]["name"] = self.from_name
        return payload

    async def send(self, to: str, subject: str, message: str, is_html: bool = False) -> NotificationResult:
        logger.info(f"📤 Sending SendGrid email to {to}", extra={"channel": CHANNEL_EMAIL, "provider": self.name})

        client = self.http_client or httpx.AsyncClient()
        close_client = self.http_client is None
        try:
            response = await client.post(
                SENDGRID_SEND_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=self._build_payload(to, subject, message, is_html),
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.error("SendGrid API timeout", extra={"channel": CHANNEL_EMAIL})
            return self._failure("SendGrid API timeout")
        finally:
            if close_client:
                await client.aclose()

        # SendGrid answers 202 Accepted with an empty body
        if response.is_success:
            message_id = response.headers.get("X-Message-Id")
            logger.info(f"✅ Email accepted: id={message_id}", extra={"channel": CHANNEL_EMAIL})
            return NotificationResult(
                success=True,
                channel=CHANNEL_EMAIL,
                provider=self.name,
                message_id=message_id,
            )

        logger.error(
            f"❌ SendGrid API error: {response.status_code} - {response.text}",
            extra={"channel": CHANNEL_EMAIL}
        )
        detail = _error_detail(response)
        if detail:
            return self._failure(f"SendGrid API error: {response.status_code} - {detail}")
        return self._failure(f"SendGrid API error: {response.status_code}")

    def _failure(self, error: str) -> NotificationResult:
        return NotificationResult(success=False, channel=CHANNEL_EMAIL, provider=self.name, error=error)


def _error_detail(response: httpx.Response) -> Optional[str]:
    """First message from a SendGrid ``{"errors": [{"message": ...}]}`` body."""
    try:
        errors = response.json().get("errors")
    except (ValueError, AttributeError):
        return None
    if errors and isinstance(errors, list) and isinstance(errors[0], dict):
        return errors[0].get("message")
    return None


def build_email_provider(settings: Settings) -> EmailProvider:
    """
    Creates the email provider selected by EMAIL_PROVIDER.
    """
    if settings.EMAIL_PROVIDER == "sendgrid":
        return SendGridEmailProvider.from_settings(settings)

    return MockEmailProvider(delay_seconds=settings.MOCK_EMAIL_DELAY_SECONDS)
