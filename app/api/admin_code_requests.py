"""
app/api/admin_code_requests.py

Purpose: Admin code request endpoints for the admin dashboard

- List / summarize / fetch requests
- Approve and reject (two-phase: an empty reason asks for one)
- Reconcile approved requests whose code record is missing
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends

from app.api.dependencies import get_acting_admin, get_workflow
from app.core.logging import get_logger
from app.flow.states import RequestStatus
from app.models.admin_code_request import AdminCodeRequest
from app.schemas.admin_code_request import (
    AdminIdentity,
    ApprovalOutcome,
    NeedsReasonSignal,
    ReconciliationResult,
    RejectionOutcome,
    RejectRequestBody,
    RequestSummary,
)
from app.services.admin_code_service import AdminCodeRequestWorkflow

logger = get_logger(__name__)
router = APIRouter(prefix="/admin-code-requests")


@router.get("", response_model=List[AdminCodeRequest])
async def list_admin_code_requests(
    status: Optional[RequestStatus] = None,
    workflow: AdminCodeRequestWorkflow = Depends(get_workflow),
):
    """
    Lists admin code requests, newest first. Filter with ?status=pending.
    """
    return await workflow.list_requests(status)


@router.get("/summary", response_model=RequestSummary)
async def summarize_admin_code_requests(workflow: AdminCodeRequestWorkflow = Depends(get_workflow)):
    return await workflow.summarize_requests()


@router.post("/reconcile", response_model=ReconciliationResult)
async def reconcile_admin_codes(
    admin: AdminIdentity = Depends(get_acting_admin),
    workflow: AdminCodeRequestWorkflow = Depends(get_workflow),
):
    """
    Recreates admin code records for approved requests that lack one.
    """
    result = await workflow.reconcile_missing_codes(admin)
    logger.info(f"Reconciliation repaired {len(result.repaired)} request(s), {len(result.failed)} failed")
    return result


@router.get("/{request_id}", response_model=AdminCodeRequest)
async def get_admin_code_request(
    request_id: str,
    workflow: AdminCodeRequestWorkflow = Depends(get_workflow),
):
    return await workflow.get_request(request_id)


@router.post("/{request_id}/approve", response_model=ApprovalOutcome)
async def approve_admin_code_request(
    request_id: str,
    admin: AdminIdentity = Depends(get_acting_admin),
    workflow: AdminCodeRequestWorkflow = Depends(get_workflow),
):
    """
    Approves a pending request, issues its admin code and notifies the
    requester. The response carries per-channel delivery results; a failed
    channel does not undo the approval.
    """
    return await workflow.approve_by_id(request_id, admin)


@router.post("/{request_id}/reject", response_model=Union[RejectionOutcome, NeedsReasonSignal])
async def reject_admin_code_request(
    request_id: str,
    body: Optional[RejectRequestBody] = None,
    admin: AdminIdentity = Depends(get_acting_admin),
    workflow: AdminCodeRequestWorkflow = Depends(get_workflow),
):
    """
    Rejects a pending request. Without a reason nothing changes and the
    response has status "needs_reason".
    """
    reason = body.reason if body else ""
    return await workflow.reject_by_id(request_id, admin, reason)
