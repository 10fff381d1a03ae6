"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, provider credentials, etc.)
- Selects the SMS and Email provider for the process lifetime
- Validates configuration on startup
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="admin_console",
        description="MongoDB database name"
    )
    ADMIN_CODE_REQUESTS_COLLECTION: str = Field(
        default="admin-code-requests",
        description="Collection holding admin code requests"
    )
    ADMIN_CODES_COLLECTION: str = Field(
        default="admin-codes",
        description="Collection holding issued admin codes"
    )
    MONGODB_MAX_POOL_SIZE: int = Field(
        default=50,
        description="Motor connection pool size"
    )
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=5000,
        description="How long a single connect attempt waits for a server"
    )
    MONGODB_CONNECT_RETRIES: int = Field(
        default=3,
        ge=1,
        description="Connect attempts at startup before giving up"
    )
    MONGODB_RETRY_DELAY_SECONDS: float = Field(
        default=2.0,
        ge=0.0,
        description="Delay before the second connect attempt; doubles after each failure"
    )

    # Branding used in outgoing messages
    SYSTEM_NAME: str = Field(
        default="Bonstay",
        description="System name shown in SMS and email templates"
    )

    # Notification providers (fixed for the process lifetime)
    SMS_PROVIDER: Literal["mock", "twilio"] = Field(
        default="mock",
        description="SMS provider backend"
    )
    EMAIL_PROVIDER: Literal["mock", "sendgrid"] = Field(
        default="mock",
        description="Email provider backend"
    )

    # Twilio SMS
    TWILIO_ACCOUNT_SID: Optional[str] = Field(
        default=None,
        description="Twilio account SID"
    )
    TWILIO_AUTH_TOKEN: Optional[str] = Field(
        default=None,
        description="Twilio auth token"
    )
    TWILIO_FROM_NUMBER: Optional[str] = Field(
        default=None,
        description="Twilio sender number (+14155238886)"
    )

    # SendGrid email
    SENDGRID_API_KEY: Optional[str] = Field(
        default=None,
        description="SendGrid API key"
    )
    FROM_EMAIL: str = Field(
        default="noreply@bonstay.com",
        description="Sender address for outgoing email"
    )
    FROM_NAME: str = Field(
        default="Bonstay Admin",
        description="Sender display name for outgoing email"
    )

    # Mock provider behaviour
    MOCK_SMS_FAILURE_RATE: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Probability that the mock SMS provider fails a send"
    )
    MOCK_SMS_DELAY_SECONDS: float = Field(
        default=1.0,
        ge=0.0,
        description="Simulated latency of the mock SMS provider"
    )
    MOCK_EMAIL_DELAY_SECONDS: float = Field(
        default=0.8,
        ge=0.0,
        description="Simulated latency of the mock email provider"
    )
    NOTIFICATION_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="HTTP timeout for real notification providers"
    )

    # Workflow
    ENFORCE_MOBILE_VALIDATION: bool = Field(
        default=False,
        description="Reject approvals whose requester phone is not a valid Indian mobile"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    SLOW_REQUEST_SECONDS: float = Field(
        default=10.0,
        description="Requests slower than this are logged as warnings"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("TWILIO_FROM_NUMBER", always=True)
    def validate_twilio_credentials(cls, v, values):
        """Ensure Twilio credentials are set when Twilio is selected."""
        if values.get("SMS_PROVIDER") == "twilio":
            if not (values.get("TWILIO_ACCOUNT_SID") and values.get("TWILIO_AUTH_TOKEN") and v):
                raise ValueError(
                    "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER "
                    "are required when SMS_PROVIDER=twilio"
                )
        return v

    @validator("SENDGRID_API_KEY", always=True)
    def validate_sendgrid_key(cls, v, values):
        """Ensure SendGrid key is set when SendGrid is selected."""
        if values.get("EMAIL_PROVIDER") == "sendgrid" and not v:
            raise ValueError("SENDGRID_API_KEY is required when EMAIL_PROVIDER=sendgrid")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.MONGODB_DB_NAME:
        errors.append("MONGODB_DB_NAME is required")

    # Production-specific validations
    if settings.is_production:
        if settings.SMS_PROVIDER == "mock":
            errors.append("SMS_PROVIDER must not be 'mock' in production")
        if settings.EMAIL_PROVIDER == "mock":
            errors.append("EMAIL_PROVIDER must not be 'mock' in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
