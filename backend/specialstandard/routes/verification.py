"""
SpecialStandard Backend — Email Verification Routes
====================================================

A signed-in user asks for a 6-digit code (valid VERIFICATION_CODE_TTL_MINUTES,
10 by default) and confirms it. Asking again retires the earlier code.
"""

from fastapi import APIRouter, Depends

from specialstandard.database import Database, get_database
from specialstandard.dependencies import require_user
from specialstandard.exceptions import ValidationError
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES
from specialstandard.schemas.auth import (
    AuthenticatedUser,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from specialstandard.schemas.common import MessageResponse
from specialstandard.services.auth_service import auth_service

router = APIRouter(
    prefix=f"{API_PREFIX}/verification", tags=["Verification"], responses=ERROR_RESPONSES
)


@router.post("/send-code", response_model=MessageResponse, summary="Email a verification code")
async def send_code(
    user: AuthenticatedUser = Depends(require_user),
    db: Database = Depends(get_database),
) -> MessageResponse:
    message_id = await auth_service.send_verification_code(db, user)
    return MessageResponse(message=f"Verification code sent ({message_id})")


@router.post("/verify", response_model=VerifyCodeResponse, summary="Confirm a verification code")
async def verify(
    data: VerifyCodeRequest,
    user: AuthenticatedUser = Depends(require_user),
    db: Database = Depends(get_database),
) -> VerifyCodeResponse:
    if not await auth_service.verify_code(db, user, data.code):
        raise ValidationError(message="Invalid or expired code", field="code")
    return VerifyCodeResponse(verified=True, message="Email verified successfully")
