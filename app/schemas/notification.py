"""
app/schemas/notification.py

Purpose: Notification delivery result

- Uniform result returned by every SMS and Email provider
- Never persisted; carried back to the caller inside workflow outcomes
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from utils.time_utils import utc_now


class NotificationResult(BaseModel):
    """
    Outcome of a single send on one channel.

    A failed send is still a result: success is False and error says why.
    """
    success: bool
    channel: Literal["sms", "email"]
    provider: str = Field(..., description="Provider that handled the send (mock, twilio, sendgrid)")
    message_id: Optional[str] = Field(default=None, alias="messageId")
    timestamp: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "success": True,
                "channel": "sms",
                "provider": "twilio",
                "messageId": "SM0123456789abcdef0123456789abcdef",
                "timestamp": "2024-04-05T10:16:02Z"
            }
        }
