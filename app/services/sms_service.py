"""
app/services/sms_service.py

Purpose: SMS providers

- MockSmsProvider: logs the message, simulates latency and a small failure rate
- TwilioSmsProvider: sends through the Twilio Messages API
- Both return a NotificationResult instead of raising on delivery failure
"""

import asyncio
import random
from typing import Optional, Protocol

import httpx

from app.core.config import Settings
from app.core.logging import get_logger
from app.schemas.notification import NotificationResult
from utils.constants import CHANNEL_SMS, MOCK_SMS_FAILURE_MESSAGE
from utils.time_utils import epoch_millis

logger = get_logger(__name__)


class SmsProvider(Protocol):
    name: str

    async def send(self, to_phone: str, message: str) -> NotificationResult:
        ...


class MockSmsProvider:
    """
    Development provider. Nothing leaves the process.

    Fails `failure_rate` of the time on purpose so the approval flow's
    partial-failure handling gets exercised outside production.
    """

    name = "mock"

    def __init__(
        self,
        failure_rate: float = 0.05,
        delay_seconds: float = 1.0,
        rng: Optional[random.Random] = None,
    ):
        self.failure_rate = failure_rate
        self.delay_seconds = delay_seconds
        self._rng = rng or random.Random()

    async def send(self, to_phone: str, message: str) -> NotificationResult:
        logger.info(f"📱 MOCK SMS to {to_phone}: {message}", extra={"channel": CHANNEL_SMS, "provider": self.name})

        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        if self._rng.random() < self.failure_rate:
            logger.warning("Mock SMS send failed (simulated)", extra={"channel": CHANNEL_SMS})
            return NotificationResult(
                success=False,
                channel=CHANNEL_SMS,
                provider=self.name,
                error=MOCK_SMS_FAILURE_MESSAGE,
            )

        return NotificationResult(
            success=True,
            channel=CHANNEL_SMS,
            provider=self.name,
            message_id=f"mock-{epoch_millis()}",
        )


class TwilioSmsProvider:
    """Sends SMS via the Twilio REST API."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{account_sid}"
        self.http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioSmsProvider":
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_FROM_NUMBER,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )

    async def send(self, to_phone: str, message: str) -> NotificationResult:
        """
        Sends an SMS via Twilio

        Args:
            to_phone: Recipient phone in E.164 (+919876543210)
            message: Message text

        Returns:
            NotificationResult; message_id is the Twilio SID on success
        """
        url = f"{self.base_url}/Messages.json"
        data = {
            "From": self.from_number,
            "To": to_phone,
            "Body": message,
        }

        logger.info(f"📤 Sending Twilio SMS to {to_phone}", extra={"channel": CHANNEL_SMS, "provider": self.name})

        client = self.http_client or httpx.AsyncClient()
        close_client = self.http_client is None
        try:
            response = await client.post(
                url,
                data=data,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.error("Twilio API timeout", extra={"channel": CHANNEL_SMS})
            return self._failure("Twilio API timeout")
        finally:
            if close_client:
                await client.aclose()

        if response.is_success:
            result = _json_body(response)
            logger.info(f"✅ SMS sent: SID={result.get('sid')}", extra={"channel": CHANNEL_SMS})
            return NotificationResult(
                success=True,
                channel=CHANNEL_SMS,
                provider=self.name,
                message_id=result.get("sid"),
            )

        logger.error(
            f"❌ Twilio API error: {response.status_code} - {response.text}",
            extra={"channel": CHANNEL_SMS}
        )
        detail = _json_body(response).get("message")
        if detail:
            return self._failure(f"Twilio API error: {response.status_code} - {detail}")
        return self._failure(f"Twilio API error: {response.status_code}")

    def _failure(self, error: str) -> NotificationResult:
        return NotificationResult(success=False, channel=CHANNEL_SMS, provider=self.name, error=error)


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def build_sms_provider(settings: Settings) -> SmsProvider:
    """
    Creates the SMS provider selected by SMS_PROVIDER.
    """
    if settings.SMS_PROVIDER == "twilio":
        return TwilioSmsProvider.from_settings(settings)

    return MockSmsProvider(
        failure_rate=settings.MOCK_SMS_FAILURE_RATE,
        delay_seconds=settings.MOCK_SMS_DELAY_SECONDS,
    )
