"""
app/models/admin_code.py

Purpose: Issued admin code document model

- One record per approval, created next to the request update
- requestId points back at the originating request (lookup only)
- isUsed flips to true when the code is consumed at registration
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.flow.states import RequestStatus


class AdminCode(BaseModel):
    id: Optional[str] = None
    code: str
    status: RequestStatus = RequestStatus.APPROVED
    is_used: bool = Field(default=False, alias="isUsed")
    created_at: datetime = Field(..., alias="createdAt")
    approved_by: str = Field(..., alias="approvedBy")
    request_id: str = Field(..., alias="requestId")

    def to_document(self) -> dict:
        document = self.model_dump(by_alias=True, exclude_none=True)
        document["status"] = self.status.value
        return document

    class Config:
        populate_by_name = True
        extra = "allow"
