"""
app/api/utilities.py

Purpose: Stateless helpers exposed to the admin dashboard

- Generate and validate admin codes
- Normalize and validate phone numbers
"""

from fastapi import APIRouter

from app.schemas.admin_code_request import (
    CodeBody,
    CodeValidationResponse,
    GeneratedCodeResponse,
    PhoneBody,
    PhoneCheckResponse,
)
from utils.code_utils import generate_admin_code, validate_admin_code
from utils.validation_utils import normalize_phone_number, validate_phone_number

router = APIRouter()


@router.post("/admin-codes/generate", response_model=GeneratedCodeResponse)
async def generate_code():
    """Generates a code without issuing it (nothing is stored)."""
    return GeneratedCodeResponse(code=generate_admin_code())


@router.post("/admin-codes/validate", response_model=CodeValidationResponse)
async def validate_code(body: CodeBody):
    return CodeValidationResponse(code=body.code, valid=validate_admin_code(body.code))


@router.post("/phone/normalize", response_model=PhoneCheckResponse)
@router.post("/phone/validate", response_model=PhoneCheckResponse)
async def check_phone(body: PhoneBody):
    return PhoneCheckResponse(
        phone=body.phone,
        normalized=normalize_phone_number(body.phone),
        valid=validate_phone_number(body.phone),
    )
