from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body of every error response.
    """
    error: str = Field(..., description="Human readable message")
    code: str = Field(..., description="Stable machine code, e.g. ALREADY_PROCESSED")
    details: Optional[Any] = None

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Request 1712345678901 is already approved",
                "code": "ALREADY_PROCESSED",
                "details": {"requestId": "1712345678901", "status": "approved"}
            }
        }
