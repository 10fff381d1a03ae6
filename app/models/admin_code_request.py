"""
app/models/admin_code_request.py

Purpose: Admin code request document model

- Requester profile (name, contact details, organization, reason)
- Lifecycle status and decision metadata
- camelCase aliases match the stored documents
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, validator

from app.flow.states import RequestStatus


class AdminCodeRequest(BaseModel):
    """
    A request for elevated (admin) registration access.

    Approval fields are set only when status is APPROVED and rejection
    fields only when status is REJECTED. Fields the console does not know
    about are kept so a full-document update never drops them.
    """

    id: str
    name: str
    email: str
    phone_no: str = Field(..., alias="phoneNo")
    organization: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    reason: Optional[str] = None
    request_date: Optional[datetime] = Field(default=None, alias="requestDate")
    status: RequestStatus = RequestStatus.PENDING

    # Approval
    admin_code: Optional[str] = Field(default=None, alias="adminCode")
    approved_by: Optional[str] = Field(default=None, alias="approvedBy")
    approved_date: Optional[datetime] = Field(default=None, alias="approvedDate")
    code_used: Optional[bool] = Field(default=None, alias="codeUsed")
    code_used_date: Optional[datetime] = Field(default=None, alias="codeUsedDate")
    registered_user_id: Optional[str] = Field(default=None, alias="registeredUserId")

    # Rejection
    rejected_by: Optional[str] = Field(default=None, alias="rejectedBy")
    rejected_date: Optional[datetime] = Field(default=None, alias="rejectedDate")
    rejection_reason: Optional[str] = Field(default=None, alias="rejectionReason")

    @validator("id", pre=True)
    def coerce_id(cls, v):
        """Older documents were stored with numeric ids."""
        return str(v) if isinstance(v, int) else v

    def to_document(self) -> dict:
        """Serializes to the stored (camelCase) document shape."""
        document = self.model_dump(by_alias=True)
        document["status"] = self.status.value
        return document

    class Config:
        populate_by_name = True
        extra = "allow"
        json_schema_extra = {
            "example": {
                "id": "1712345678901",
                "name": "Priya Sharma",
                "email": "priya@example.com",
                "phoneNo": "9876543210",
                "organization": "Bonstay Hotels",
                "position": "Operations Lead",
                "department": "Operations",
                "reason": "Need to manage property bookings",
                "requestDate": "2024-04-05T10:15:00Z",
                "status": "pending"
            }
        }
