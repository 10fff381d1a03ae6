import re

import pytest

from app.core.exceptions import (
    AdminIdentityMissingError,
    AlreadyProcessedError,
    PersistenceFailureError,
    ResourceNotFoundError,
    ValidationError,
)
from app.flow.states import RequestStatus
from app.schemas.admin_code_request import AdminIdentity, NeedsReasonSignal, RejectionOutcome
from app.services.admin_code_service import AdminCodeRequestWorkflow
from app.services.notification_service import NotificationDispatcher
from fakes import CODES, REQUESTS, StubEmailProvider, StubSmsProvider


ADMIN = AdminIdentity(id="A1", name="Asha")
CODE_PATTERN = re.compile(r"^ADMIN[0-9A-Z]+$")


# ==============================================
# APPROVE
# ==============================================

@pytest.mark.anyio
async def test_approve_pending_request(workflow, store, seed_request):
    request = seed_request()

    outcome = await workflow.approve(request, ADMIN)

    assert CODE_PATTERN.match(outcome.admin_code)
    assert outcome.request.status == RequestStatus.APPROVED
    assert outcome.request.admin_code == outcome.admin_code
    assert outcome.request.approved_by == "A1"
    assert outcome.request.approved_date is not None
    assert outcome.request.code_used is False
    assert outcome.request.code_used_date is None
    assert outcome.request.registered_user_id is None

    stored = (await store.get(REQUESTS, request.id))
    assert stored["status"] == "approved"
    assert stored["adminCode"] == outcome.admin_code
    assert stored["codeUsed"] is False
    assert stored["rejectionReason"] is None


@pytest.mark.anyio
async def test_approve_creates_admin_code_record(workflow, store, seed_request):
    request = seed_request()

    outcome = await workflow.approve(request, ADMIN)

    codes = store.documents(CODES)
    assert len(codes) == 1
    assert codes[0]["requestId"] == request.id
    assert codes[0]["approvedBy"] == "A1"
    assert codes[0]["code"] == outcome.admin_code
    assert codes[0]["isUsed"] is False
    assert codes[0]["status"] == "approved"
    assert outcome.code_record.request_id == request.id


@pytest.mark.anyio
async def test_approve_sends_sms_then_email(workflow, seed_request, sms_provider, email_provider):
    request = seed_request()

    outcome = await workflow.approve(request, ADMIN)

    assert len(outcome.notifications) == 2
    assert [r.channel for r in outcome.notifications] == ["sms", "email"]
    assert outcome.partial_failure is False

    assert sms_provider.sent[0]["to"] == "+919876543210"
    assert sms_provider.sent[0]["message"].startswith(
        f"Hello Priya Sharma, Your Bonstay Admin Access Code is: {outcome.admin_code}."
    )
    assert sms_provider.sent[0]["message"].endswith("Valid until you use it for registration.")

    assert email_provider.sent[0]["to"] == "priya@example.com"
    assert email_provider.sent[0]["subject"] == "Admin Access Request Approved"
    assert "9876543210" in email_provider.sent[0]["message"]
    assert "Dear Priya Sharma" in email_provider.sent[0]["message"]


@pytest.mark.anyio
async def test_approve_reports_failed_sms_without_rolling_back(store, email_provider, app_settings, seed_request):
    failing_sms = StubSmsProvider(success=False, error="Mock SMS service failure")
    workflow = AdminCodeRequestWorkflow(
        store=store,
        notifier=NotificationDispatcher(failing_sms, email_provider),
        settings=app_settings,
    )
    request = seed_request()

    outcome = await workflow.approve(request, ADMIN)

    assert outcome.partial_failure is True
    assert outcome.sms.success is False
    assert outcome.sms.error == "Mock SMS service failure"
    assert outcome.email.success is True
    assert (await store.get(REQUESTS, request.id))["status"] == "approved"
    assert len(store.documents(CODES)) == 1


@pytest.mark.anyio
async def test_approve_survives_sms_provider_exception(store, email_provider, app_settings, seed_request):
    exploding_sms = StubSmsProvider(raises=RuntimeError("carrier unreachable"))
    workflow = AdminCodeRequestWorkflow(
        store=store,
        notifier=NotificationDispatcher(exploding_sms, email_provider),
        settings=app_settings,
    )

    outcome = await workflow.approve(seed_request(), ADMIN)

    assert outcome.sms.success is False
    assert "carrier unreachable" in outcome.sms.error
    assert len(email_provider.sent) == 1
    assert outcome.partial_failure is True


@pytest.mark.parametrize("admin", [None, AdminIdentity(), AdminIdentity(id=""), AdminIdentity(id="   ")])
@pytest.mark.anyio
async def test_approve_requires_admin_identity(workflow, store, seed_request, sms_provider, admin):
    request = seed_request()

    with pytest.raises(AdminIdentityMissingError):
        await workflow.approve(request, admin)

    assert (await store.get(REQUESTS, request.id))["status"] == "pending"
    assert store.documents(CODES) == []
    assert sms_provider.sent == []


@pytest.mark.parametrize("status", ["approved", "rejected"])
@pytest.mark.anyio
async def test_approve_decided_request_is_already_processed(workflow, store, seed_request, sms_provider, email_provider, status):
    request = seed_request(status=status)
    before = await store.get(REQUESTS, request.id)

    with pytest.raises(AlreadyProcessedError) as exc_info:
        await workflow.approve(request, ADMIN)

    assert exc_info.value.details["status"] == status
    assert await store.get(REQUESTS, request.id) == before
    assert store.documents(CODES) == []
    assert sms_provider.sent == []
    assert email_provider.sent == []


@pytest.mark.anyio
async def test_second_approval_with_stale_copy_is_rejected_by_store(workflow, store, seed_request, sms_provider):
    stale = seed_request()

    first = await workflow.approve(stale, ADMIN)
    with pytest.raises(AlreadyProcessedError):
        await workflow.approve(stale, AdminIdentity(id="A2"))

    assert len(store.documents(CODES)) == 1
    assert (await store.get(REQUESTS, stale.id))["adminCode"] == first.admin_code
    assert len(sms_provider.sent) == 1


@pytest.mark.anyio
async def test_approve_update_failure_sends_nothing(workflow, store, seed_request, sms_provider, email_provider):
    request = seed_request()
    store.fail_updates = True

    with pytest.raises(PersistenceFailureError):
        await workflow.approve(request, ADMIN)

    assert store.documents(CODES) == []
    assert sms_provider.sent == []
    assert email_provider.sent == []


@pytest.mark.anyio
async def test_approve_code_write_failure_leaves_request_approved(workflow, store, seed_request, sms_provider):
    request = seed_request()
    store.fail_creates = True

    with pytest.raises(PersistenceFailureError) as exc_info:
        await workflow.approve(request, ADMIN)

    assert exc_info.value.details["requestCommitted"] is True
    assert (await store.get(REQUESTS, request.id))["status"] == "approved"
    assert store.documents(CODES) == []
    assert sms_provider.sent == []


@pytest.mark.anyio
async def test_approve_keeps_unknown_document_fields(workflow, store, seed_request):
    request = seed_request(hotelId="H7")

    await workflow.approve(request, ADMIN)

    assert (await store.get(REQUESTS, request.id))["hotelId"] == "H7"


@pytest.mark.anyio
async def test_enforced_mobile_validation_blocks_invalid_phone(store, dispatcher, app_settings, seed_request, sms_provider):
    strict_settings = app_settings.model_copy(update={"ENFORCE_MOBILE_VALIDATION": True})
    workflow = AdminCodeRequestWorkflow(store=store, notifier=dispatcher, settings=strict_settings)
    request = seed_request(phoneNo="12345")

    with pytest.raises(ValidationError):
        await workflow.approve(request, ADMIN)

    assert (await store.get(REQUESTS, request.id))["status"] == "pending"
    assert sms_provider.sent == []


@pytest.mark.anyio
async def test_unenforced_mobile_validation_still_dispatches(workflow, seed_request, sms_provider):
    request = seed_request(phoneNo="+1 (415) 555-0100")

    outcome = await workflow.approve(request, ADMIN)

    assert outcome.request.status == RequestStatus.APPROVED
    assert sms_provider.sent[0]["to"] == "+1 (415) 555-0100"


# ==============================================
# REJECT
# ==============================================

@pytest.mark.parametrize("reason", ["", "   ", None])
@pytest.mark.anyio
async def test_reject_without_reason_needs_reason(workflow, store, seed_request, email_provider, reason):
    request = seed_request()
    before = await store.get(REQUESTS, request.id)

    result = await workflow.reject(request, ADMIN, reason)

    assert isinstance(result, NeedsReasonSignal)
    assert result.request_id == request.id
    assert await store.get(REQUESTS, request.id) == before
    assert email_provider.sent == []


@pytest.mark.anyio
async def test_reject_with_reason(workflow, store, seed_request, sms_provider, email_provider):
    request = seed_request()

    result = await workflow.reject(request, ADMIN, "Invalid organization")

    assert isinstance(result, RejectionOutcome)
    assert result.request.status == RequestStatus.REJECTED
    assert result.request.rejection_reason == "Invalid organization"
    assert result.request.rejected_by == "A1"
    assert result.request.rejected_date is not None
    assert result.partial_failure is False

    stored = await store.get(REQUESTS, request.id)
    assert stored["status"] == "rejected"
    assert stored["rejectionReason"] == "Invalid organization"
    assert stored["adminCode"] is None
    assert store.documents(CODES) == []

    assert sms_provider.sent == []
    assert email_provider.sent[0]["subject"] == "Admin Access Request - Status Update"
    assert "Reason: Invalid organization" in email_provider.sent[0]["message"]


@pytest.mark.anyio
async def test_reject_stores_reason_as_given(workflow, store, seed_request):
    request = seed_request()

    result = await workflow.reject(request, ADMIN, "  Invalid organization  ")

    assert result.request.rejection_reason == "  Invalid organization  "
    assert (await store.get(REQUESTS, request.id))["rejectionReason"] == "  Invalid organization  "


@pytest.mark.anyio
async def test_reject_reports_email_failure(store, sms_provider, app_settings, seed_request):
    workflow = AdminCodeRequestWorkflow(
        store=store,
        notifier=NotificationDispatcher(sms_provider, StubEmailProvider(success=False, error="SendGrid API error: 500")),
        settings=app_settings,
    )
    request = seed_request()

    result = await workflow.reject(request, ADMIN, "Insufficient justification")

    assert result.partial_failure is True
    assert result.email.error == "SendGrid API error: 500"
    assert (await store.get(REQUESTS, request.id))["status"] == "rejected"


@pytest.mark.parametrize("status", ["approved", "rejected"])
@pytest.mark.anyio
async def test_reject_decided_request_is_already_processed(workflow, store, seed_request, email_provider, status):
    request = seed_request(status=status)
    before = await store.get(REQUESTS, request.id)

    with pytest.raises(AlreadyProcessedError):
        await workflow.reject(request, ADMIN, "Too late")

    assert await store.get(REQUESTS, request.id) == before
    assert email_provider.sent == []


@pytest.mark.anyio
async def test_reject_requires_admin_identity(workflow, store, seed_request):
    request = seed_request()

    with pytest.raises(AdminIdentityMissingError):
        await workflow.reject(request, AdminIdentity(id=None), "Invalid organization")

    assert (await store.get(REQUESTS, request.id))["status"] == "pending"


@pytest.mark.anyio
async def test_reject_update_failure_sends_nothing(workflow, store, seed_request, email_provider):
    request = seed_request()
    store.fail_updates = True

    with pytest.raises(PersistenceFailureError):
        await workflow.reject(request, ADMIN, "Invalid organization")

    assert email_provider.sent == []


# ==============================================
# LOOKUPS
# ==============================================

@pytest.mark.anyio
async def test_list_requests_newest_first(workflow, seed_requests):
    requests = await workflow.list_requests()

    assert [r.id for r in requests] == ["r3", "r2", "r1"]


@pytest.mark.anyio
async def test_list_requests_by_status(workflow, seed_requests):
    pending = await workflow.list_requests(RequestStatus.PENDING)

    assert [r.id for r in pending] == ["r1"]


@pytest.mark.anyio
async def test_summarize_requests(workflow, seed_requests, seed_request):
    seed_request(id="r4", status="pending")

    summary = await workflow.summarize_requests()

    assert summary.total == 4
    assert summary.pending == 2
    assert summary.approved == 1
    assert summary.rejected == 1


@pytest.mark.anyio
async def test_get_missing_request(workflow):
    with pytest.raises(ResourceNotFoundError):
        await workflow.get_request("nope")


@pytest.mark.anyio
async def test_approve_by_id_loads_stored_request(workflow, store, seed_request):
    seed_request(id="r9")

    outcome = await workflow.approve_by_id("r9", ADMIN)

    assert outcome.request.id == "r9"
    assert (await store.get(REQUESTS, "r9"))["status"] == "approved"


# ==============================================
# RECONCILIATION
# ==============================================

@pytest.mark.anyio
async def test_reconcile_recreates_missing_code_record(workflow, store, seed_request):
    request = seed_request()
    store.fail_creates = True
    with pytest.raises(PersistenceFailureError):
        await workflow.approve(request, ADMIN)
    store.fail_creates = False

    missing = await workflow.find_requests_missing_codes()
    assert [r.id for r in missing] == [request.id]

    result = await workflow.reconcile_missing_codes(AdminIdentity(id="A2"))

    assert result.repaired == [request.id]
    codes = store.documents(CODES)
    assert len(codes) == 1
    assert codes[0]["requestId"] == request.id
    assert codes[0]["approvedBy"] == "A1"
    assert codes[0]["code"] == (await store.get(REQUESTS, request.id))["adminCode"]

    assert (await workflow.reconcile_missing_codes(ADMIN)).repaired == []


@pytest.mark.anyio
async def test_reconcile_continues_past_a_failed_record(workflow, store, seed_request):
    seed_request(id="r1", status="approved", adminCode="ADMIN1111111111", approvedBy="A9")
    seed_request(id="r2", status="approved", adminCode="ADMIN2222222222", approvedBy="A9")
    store.fail_creates_for = {"r1"}

    result = await workflow.reconcile_missing_codes(ADMIN)

    assert result.failed == ["r1"]
    assert result.repaired == ["r2"]
    assert [c["requestId"] for c in store.documents(CODES)] == ["r2"]

    store.fail_creates_for = set()
    retry = await workflow.reconcile_missing_codes(ADMIN)

    assert retry.repaired == ["r1"]
    assert retry.failed == []


@pytest.mark.anyio
async def test_reconcile_ignores_requests_with_codes(workflow, seed_request):
    await workflow.approve(seed_request(), ADMIN)

    assert await workflow.find_requests_missing_codes() == []


@pytest.mark.anyio
async def test_reconcile_requires_admin_identity(workflow):
    with pytest.raises(AdminIdentityMissingError):
        await workflow.reconcile_missing_codes(None)
