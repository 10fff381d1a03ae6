"""
app/schemas/admin_code_request.py

Purpose: Workflow outcomes and API payloads for admin code requests

- AdminIdentity: the already-authenticated admin acting on a request
- ApprovalOutcome / RejectionOutcome / NeedsReasonSignal: what approve and
  reject hand back to the caller
- Small request/response bodies for the utility endpoints
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from app.models.admin_code import AdminCode
from app.models.admin_code_request import AdminCodeRequest
from app.schemas.notification import NotificationResult


class AdminIdentity(BaseModel):
    """
    The admin performing an action. Resolved upstream; only `id` is required
    for a decision to be recorded.
    """
    id: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.id and self.id.strip())


class ApprovalOutcome(BaseModel):
    """
    Result of a committed approval. Notification failures do not undo the
    approval; they show up here as failed results and partial_failure.
    """
    status: Literal["approved"] = "approved"
    admin_code: str = Field(..., alias="adminCode")
    request: AdminCodeRequest
    code_record: AdminCode = Field(..., alias="codeRecord")
    sms: NotificationResult
    email: NotificationResult
    partial_failure: bool = Field(..., alias="partialFailure")

    @property
    def notifications(self) -> List[NotificationResult]:
        return [self.sms, self.email]

    class Config:
        populate_by_name = True


class RejectionOutcome(BaseModel):
    """
    Result of a committed rejection. Only an email is sent on rejection.
    """
    status: Literal["rejected"] = "rejected"
    request: AdminCodeRequest
    email: NotificationResult
    partial_failure: bool = Field(..., alias="partialFailure")

    @property
    def notifications(self) -> List[NotificationResult]:
        return [self.email]

    class Config:
        populate_by_name = True


class NeedsReasonSignal(BaseModel):
    """
    Returned by reject when no reason was given. Nothing was changed; ask
    the admin for a reason and call reject again.
    """
    status: Literal["needs_reason"] = "needs_reason"
    request_id: str = Field(..., alias="requestId")
    message: str = "A rejection reason is required"

    class Config:
        populate_by_name = True


RejectResult = Union[RejectionOutcome, NeedsReasonSignal]


class RejectRequestBody(BaseModel):
    reason: str = ""


class RequestSummary(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class ReconciliationResult(BaseModel):
    repaired: List[str] = Field(default_factory=list, description="Request ids whose admin code record was recreated")
    failed: List[str] = Field(default_factory=list, description="Request ids whose admin code record could not be recreated")


class CodeBody(BaseModel):
    code: str


class CodeValidationResponse(BaseModel):
    code: str
    valid: bool


class GeneratedCodeResponse(BaseModel):
    code: str


class PhoneBody(BaseModel):
    phone: str


class PhoneCheckResponse(BaseModel):
    phone: str
    normalized: str
    valid: bool

