from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import Settings
from app.models.admin_code_request import AdminCodeRequest
from app.services.admin_code_service import AdminCodeRequestWorkflow
from app.services.notification_service import NotificationDispatcher
from fakes import (
    REQUESTS,
    InMemoryDocumentStore,
    StubEmailProvider,
    StubSmsProvider,
    make_request_document,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def app_settings():
    return Settings(
        SYSTEM_NAME="Bonstay",
        MOCK_SMS_DELAY_SECONDS=0,
        MOCK_EMAIL_DELAY_SECONDS=0,
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def sms_provider():
    return StubSmsProvider()


@pytest.fixture
def email_provider():
    return StubEmailProvider()


@pytest.fixture
def dispatcher(sms_provider, email_provider):
    return NotificationDispatcher(sms_provider=sms_provider, email_provider=email_provider)


@pytest.fixture
def workflow(store, dispatcher, app_settings):
    return AdminCodeRequestWorkflow(store=store, notifier=dispatcher, settings=app_settings)


@pytest.fixture
def seed_request(store):
    """Puts a request document in the store and returns it as a model."""

    def _seed(**overrides) -> AdminCodeRequest:
        document = make_request_document(**overrides)
        store.seed(REQUESTS, document)
        return AdminCodeRequest.model_validate(document)

    return _seed


@pytest.fixture
def seed_requests(seed_request):
    """Three requests, one per status, a day apart."""
    base = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)
    return [
        seed_request(id="r1", status="pending", requestDate=base),
        seed_request(id="r2", status="approved", requestDate=base + timedelta(days=1),
                     adminCode="ADMINLUQ2X1ABC123", approvedBy="A9", approvedDate=base + timedelta(days=2),
                     codeUsed=False),
        seed_request(id="r3", status="rejected", requestDate=base + timedelta(days=2),
                     rejectedBy="A9", rejectedDate=base + timedelta(days=3), rejectionReason="Duplicate request"),
    ]
