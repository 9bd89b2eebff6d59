"""
SpecialStandard Backend — Auth Routes
======================================

What:  Login, signup, logout and password management.
How:   Delegates to AuthService; this module only deals with cookies.

Cookies set at login/signup:
    jwt     httponly access token, read by `require_user`
    userID  the caller's user id, readable by the frontend
Both are session cookies unless `remember_me` is set, in which case they
last `AUTH_SESSION_DAYS` days.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from specialstandard.config import settings
from specialstandard.database import Database, get_database
from specialstandard.dependencies import JWT_COOKIE, USER_ID_COOKIE, require_user
from specialstandard.routes import API_PREFIX, ERROR_RESPONSES
from specialstandard.schemas.auth import (
    AuthenticatedUser,
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SendResetOTPRequest,
    SignupRequest,
    UpdatePasswordRequest,
)
from specialstandard.schemas.common import MessageResponse
from specialstandard.services.auth_service import IssuedSession, auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/auth", tags=["Auth"], responses=ERROR_RESPONSES)


def _set_session_cookies(response: Response, session: IssuedSession, max_age: Optional[int]) -> None:
    secure = settings.auth_cookie_secure
    # browsers drop SameSite=None cookies that are not Secure
    same_site = "none" if secure else "lax"
    response.set_cookie(
        JWT_COOKIE, session.access_token,
        max_age=max_age, httponly=True, secure=secure, samesite=same_site, path="/",
    )
    response.set_cookie(
        USER_ID_COOKIE, str(session.user_id),
        max_age=max_age, secure=secure, samesite=same_site, path="/",
    )


def _clear_session_cookies(response: Response) -> None:
    for name in (JWT_COOKIE, USER_ID_COOKIE, "refreshToken"):
        response.delete_cookie(name, path="/")


@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
async def login(data: LoginRequest, response: Response) -> AuthResponse:
    session = await auth_service.login(data)
    max_age = settings.auth_session_days * 24 * 3600 if data.remember_me else None
    _set_session_cookies(response, session, max_age)
    return AuthResponse(
        message="Login successful", user_id=session.user_id, access_token=session.access_token
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=201,
    summary="Create an account and its therapist profile",
)
async def signup(
    data: SignupRequest,
    response: Response,
    db: Database = Depends(get_database),
) -> AuthResponse:
    session = await auth_service.signup(db, data)
    _set_session_cookies(response, session, settings.auth_session_days * 24 * 3600)
    return AuthResponse(
        message="Signup successful", user_id=session.user_id, access_token=session.access_token
    )


@router.post("/logout", response_model=MessageResponse, summary="Clear session cookies")
async def logout(response: Response) -> MessageResponse:
    _clear_session_cookies(response)
    return MessageResponse(message="Logged out")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Email a password recovery link",
)
async def forgot_password(data: ForgotPasswordRequest) -> MessageResponse:
    await auth_service.forgot_password(data)
    return MessageResponse(message="Password recovery email sent")


@router.post(
    "/send-reset-otp",
    response_model=MessageResponse,
    summary="Email a 6-digit password reset code",
)
async def send_reset_otp(data: SendResetOTPRequest) -> MessageResponse:
    await auth_service.send_reset_otp(data.email)
    return MessageResponse(message="If the account exists, a reset code has been sent")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset the password with an emailed code",
)
async def reset_password(
    data: ResetPasswordRequest,
    db: Database = Depends(get_database),
) -> MessageResponse:
    await auth_service.reset_password(db, data)
    return MessageResponse(message="Password has been reset")


@router.put(
    "/update-password",
    response_model=MessageResponse,
    summary="Change the signed-in user's password",
)
async def update_password(
    data: UpdatePasswordRequest,
    user: AuthenticatedUser = Depends(require_user),
) -> MessageResponse:
    await auth_service.update_password(user, data.password)
    return MessageResponse(message="Password updated")


@router.delete(
    "/delete-account",
    response_model=MessageResponse,
    summary="Delete the signed-in user's account",
)
async def delete_account(
    response: Response,
    user: AuthenticatedUser = Depends(require_user),
    db: Database = Depends(get_database),
) -> MessageResponse:
    await auth_service.delete_account(db, user)
    _clear_session_cookies(response)
    return MessageResponse(message="Account deleted")
