"""
app/services/admin_code_service.py

Purpose: Admin code request lifecycle

- approve: issue a one-time admin code, persist it, notify by SMS and Email
- reject: record the decision and reason, notify by Email
- Listing, lookup and per-status counts for the admin dashboard
- Reconciliation of approved requests whose code record is missing

Each call runs its steps strictly one after another. Persistence faults
abort the call; notification faults are reported on the outcome.
"""

from typing import Callable, List, Optional

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import (
    AdminIdentityMissingError,
    AlreadyProcessedError,
    PersistenceFailureError,
    ResourceNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.db.store import DocumentStore
from app.flow.states import RequestStatus, get_state_metadata, is_valid_transition
from app.models.admin_code import AdminCode
from app.models.admin_code_request import AdminCodeRequest
from app.schemas.admin_code_request import (
    AdminIdentity,
    ApprovalOutcome,
    NeedsReasonSignal,
    ReconciliationResult,
    RejectionOutcome,
    RejectResult,
    RequestSummary,
)
from app.services.notification_service import NotificationDispatcher
from utils.code_utils import generate_admin_code
from utils.message_utils import build_admin_code_sms, build_approval_email, build_rejection_email
from utils.time_utils import utc_now
from utils.validation_utils import validate_phone_number

logger = get_logger(__name__)


class AdminCodeRequestWorkflow:
    """
    Moves admin code requests from pending to approved or rejected.

    There is no lock across calls. The status write is conditioned on the
    stored status still being pending, so when two admins decide the same
    request at once only one write lands and the other call gets
    AlreadyProcessedError. The request update and the code record are two
    separate writes; see reconcile_missing_codes.
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: NotificationDispatcher,
        settings: Settings = default_settings,
        code_generator: Callable[[], str] = generate_admin_code,
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings
        self.code_generator = code_generator
        self.requests_collection = settings.ADMIN_CODE_REQUESTS_COLLECTION
        self.codes_collection = settings.ADMIN_CODES_COLLECTION

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_request(self, request_id: str) -> AdminCodeRequest:
        document = await self.store.get(self.requests_collection, request_id)
        if not document:
            raise ResourceNotFoundError(f"Admin code request {request_id} not found")
        return AdminCodeRequest.model_validate(document)

    async def list_requests(self, status: Optional[RequestStatus] = None) -> List[AdminCodeRequest]:
        """
        Lists requests, newest first, optionally only those in one status.
        """
        if status is None:
            documents = await self.store.get(self.requests_collection) or []
        else:
            documents = await self.store.find(self.requests_collection, {"status": status.value})

        requests = [AdminCodeRequest.model_validate(document) for document in documents]
        # Requests without a date go last
        requests.sort(key=lambda r: r.request_date.timestamp() if r.request_date else float("-inf"), reverse=True)
        return requests

    async def summarize_requests(self) -> RequestSummary:
        summary = RequestSummary()
        for request in await self.list_requests():
            summary.total += 1
            setattr(summary, request.status.value, getattr(summary, request.status.value) + 1)
        return summary

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def approve(self, request: AdminCodeRequest, acting_admin: Optional[AdminIdentity]) -> ApprovalOutcome:
        """
        Approves a pending request and sends the new admin code.

        Args:
            request: The request as last read by the caller
            acting_admin: Admin approving the request

        Returns:
            ApprovalOutcome with the code and both notification results

        Raises:
            AdminIdentityMissingError: acting admin has no id
            AlreadyProcessedError: request is not pending (or stopped being pending)
            ValidationError: mobile validation is enforced and the phone is invalid
            PersistenceFailureError: the request update or code record write failed
        """
        admin_id = self._require_admin(acting_admin)
        self._require_transition(request, RequestStatus.APPROVED)

        if self.settings.ENFORCE_MOBILE_VALIDATION and not validate_phone_number(request.phone_no):
            raise ValidationError(
                f"Invalid mobile number for request {request.id}",
                details={"phoneNo": request.phone_no}
            )

        with LogContext(request_id=request.id, admin_id=admin_id):
            logger.info("Starting admin code approval")

            admin_code = self.code_generator()
            approved_at = utc_now()
            logger.debug(f"Generated admin code {admin_code}")

            approved = request.model_copy(update={
                "status": RequestStatus.APPROVED,
                "admin_code": admin_code,
                "approved_by": admin_id,
                "approved_date": approved_at,
                "code_used": False,
                "code_used_date": None,
                "registered_user_id": None,
            })
            updated_request = await self._commit_transition(request, approved)
            logger.info("Request marked approved")

            code_record = AdminCode(
                code=admin_code,
                status=RequestStatus.APPROVED,
                is_used=False,
                created_at=approved_at,
                approved_by=admin_id,
                request_id=request.id,
            )
            try:
                created = await self.store.create(self.codes_collection, code_record.to_document())
            except PersistenceFailureError as e:
                logger.error("Request approved but admin code record was not created; run reconciliation")
                raise PersistenceFailureError(
                    f"Request {request.id} was approved but its admin code record could not be saved",
                    details={"requestId": request.id, "adminCode": admin_code, "requestCommitted": True}
                ) from e
            code_record = AdminCode.model_validate(created)

            sms_message = build_admin_code_sms(admin_code, request.name, self.settings.SYSTEM_NAME)
            sms_result = await self.notifier.send_sms(request.phone_no, sms_message)

            email_content = build_approval_email(request.name, request.phone_no, self.settings.SYSTEM_NAME)
            email_result = await self.notifier.send_email(
                request.email, email_content["subject"], email_content["message"]
            )

            partial_failure = not (sms_result.success and email_result.success)
            if partial_failure:
                logger.warning(
                    f"Approval committed with failed notifications: "
                    f"sms={'ok' if sms_result.success else sms_result.error}, "
                    f"email={'ok' if email_result.success else email_result.error}"
                )
            else:
                logger.info("Approval complete, SMS and email sent")

            return ApprovalOutcome(
                admin_code=admin_code,
                request=updated_request,
                code_record=code_record,
                sms=sms_result,
                email=email_result,
                partial_failure=partial_failure,
            )

    async def reject(
        self,
        request: AdminCodeRequest,
        acting_admin: Optional[AdminIdentity],
        reason: Optional[str],
    ) -> RejectResult:
        """
        Rejects a pending request.

        A blank reason is not an error: nothing is written or sent and a
        NeedsReasonSignal comes back so the caller can collect one.

        Raises:
            AdminIdentityMissingError: acting admin has no id
            AlreadyProcessedError: request is not pending (or stopped being pending)
            PersistenceFailureError: the request update failed
        """
        if not reason or not reason.strip():
            logger.info(f"Rejection of {request.id} needs a reason")
            return NeedsReasonSignal(request_id=request.id)

        admin_id = self._require_admin(acting_admin)
        self._require_transition(request, RequestStatus.REJECTED)

        with LogContext(request_id=request.id, admin_id=admin_id):
            logger.info("Rejecting admin code request")

            rejected = request.model_copy(update={
                "status": RequestStatus.REJECTED,
                "rejected_by": admin_id,
                "rejected_date": utc_now(),
                "rejection_reason": reason,
            })
            updated_request = await self._commit_transition(request, rejected)

            email_content = build_rejection_email(request.name, self.settings.SYSTEM_NAME, reason)
            email_result = await self.notifier.send_email(
                request.email, email_content["subject"], email_content["message"]
            )

            if not email_result.success:
                logger.warning(f"Rejection committed but email failed: {email_result.error}")

            return RejectionOutcome(
                request=updated_request,
                email=email_result,
                partial_failure=not email_result.success,
            )

    async def approve_by_id(self, request_id: str, acting_admin: Optional[AdminIdentity]) -> ApprovalOutcome:
        self._require_admin(acting_admin)
        return await self.approve(await self.get_request(request_id), acting_admin)

    async def reject_by_id(
        self,
        request_id: str,
        acting_admin: Optional[AdminIdentity],
        reason: Optional[str],
    ) -> RejectResult:
        request = await self.get_request(request_id)
        return await self.reject(request, acting_admin, reason)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def find_requests_missing_codes(self) -> List[AdminCodeRequest]:
        """
        Approved requests with no admin code record pointing back at them.
        These are left behind when the code write fails after the request
        update was committed.
        """
        missing = []
        for request in await self.list_requests(RequestStatus.APPROVED):
            if not request.admin_code:
                continue
            codes = await self.store.find(self.codes_collection, {"requestId": request.id})
            if not codes:
                missing.append(request)
        return missing

    async def reconcile_missing_codes(self, acting_admin: Optional[AdminIdentity]) -> ReconciliationResult:
        """
        Recreates the missing admin code records. No notifications are sent;
        the requester already got the code (or a failure was reported) when
        the request was approved. A request whose record still cannot be
        written is listed under ``failed`` and the rest are still repaired.
        """
        admin_id = self._require_admin(acting_admin)
        result = ReconciliationResult()

        for request in await self.find_requests_missing_codes():
            with LogContext(request_id=request.id, admin_id=admin_id):
                code_record = AdminCode(
                    code=request.admin_code,
                    status=RequestStatus.APPROVED,
                    is_used=bool(request.code_used),
                    created_at=request.approved_date or utc_now(),
                    approved_by=request.approved_by or admin_id,
                    request_id=request.id,
                )
                try:
                    await self.store.create(self.codes_collection, code_record.to_document())
                except PersistenceFailureError as e:
                    logger.error(f"Could not recreate admin code record: {e.message}")
                    result.failed.append(request.id)
                    continue
                logger.warning("Recreated missing admin code record")
                result.repaired.append(request.id)

        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_admin(acting_admin: Optional[AdminIdentity]) -> str:
        if acting_admin is None or not acting_admin.is_resolved:
            raise AdminIdentityMissingError()
        return acting_admin.id.strip()

    @staticmethod
    def _require_transition(request: AdminCodeRequest, target: RequestStatus) -> None:
        if not is_valid_transition(request.status, target):
            state = get_state_metadata(request.status)
            raise AlreadyProcessedError(
                f"Request {request.id} is already {state.display_name.lower()}",
                details={"requestId": request.id, "status": request.status.value}
            )

    async def _commit_transition(self, current: AdminCodeRequest, target: AdminCodeRequest) -> AdminCodeRequest:
        """
        Writes the decided request, only if the stored copy is still pending.
        """
        document = await self.store.update(
            self.requests_collection,
            current.id,
            target.to_document(),
            expected_status=RequestStatus.PENDING.value,
        )
        if document is not None:
            return AdminCodeRequest.model_validate(document)

        stored = await self.store.get(self.requests_collection, current.id)
        if not stored:
            raise ResourceNotFoundError(f"Admin code request {current.id} not found")

        stored_status = stored.get("status")
        logger.warning(f"Request {current.id} was decided concurrently (now {stored_status})")
        raise AlreadyProcessedError(
            f"Request {current.id} is already {stored_status}",
            details={"requestId": current.id, "status": stored_status}
        )
