"""
SpecialStandard Backend — Auth & Verification Schemas
======================================================

Request bodies for the identity-provider wrappers, plus the email
verification code flow.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from specialstandard.schemas.therapist import EMAIL_PATTERN


class LoginRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)
    remember_me: bool = False


class SignupRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    schools: List[int] = Field(default_factory=list)
    district_id: Optional[int] = None


class ForgotPasswordRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    redirect_to: Optional[str] = None


class SendResetOTPRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)


class ResetPasswordRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    otp: str = Field(pattern=r"^[0-9]{6}$")
    new_password: str


class UpdatePasswordRequest(BaseModel):
    password: str


class AuthResponse(BaseModel):
    message: str
    user_id: Optional[uuid.UUID] = None
    access_token: Optional[str] = None
    requires_mfa: bool = False


class AuthenticatedUser(BaseModel):
    """The caller, as confirmed by the identity provider."""
    id: uuid.UUID
    email: Optional[str] = None
    token: Optional[str] = Field(default=None, exclude=True, repr=False)


class VerificationCode(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    code: str
    expires_at: datetime
    used: bool = False
    created_at: Optional[datetime] = None


class VerifyCodeRequest(BaseModel):
    code: str = Field(pattern=r"^[0-9]{6}$")


class VerifyCodeResponse(BaseModel):
    verified: bool
    message: str
