"""
SpecialStandard Backend — Auth Service (Orchestrator)
======================================================

What:  Coordinates the identity provider, the therapist table, the reset
       code store and email delivery for every account flow.
How:   Each flow is a short sequence of awaited steps. Nothing here touches
       HTTP cookies; routes turn the returned tokens into cookies.
Who:   routes/auth.py and routes/verification.py.

Account model:
    A therapist row's id is the provider's user id. Signup creates the
    provider user first, then the therapist row; deleting an account
    removes the therapist row first, then the provider user.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from specialstandard.config import settings
from specialstandard.database import Database
from specialstandard.exceptions import (
    AuthenticationError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from specialstandard.repositories.therapist_repository import therapist_repository
from specialstandard.repositories.verification_repository import verification_repository
from specialstandard.schemas.auth import (
    AuthenticatedUser,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from specialstandard.schemas.therapist import TherapistCreate
from specialstandard.services.email_service import EmailService, email_service
from specialstandard.services.identity_provider import IdentityProviderClient, identity_provider
from specialstandard.services.otp_store import ExpiringStore, generate_code, reset_otp_store

logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    """Tokens handed back by the provider after login or signup."""
    user_id: uuid.UUID
    access_token: str
    expires_in: Optional[int] = None


def _issued_session(payload: dict) -> IssuedSession:
    try:
        return IssuedSession(
            user_id=uuid.UUID(str(payload["user"]["id"])),
            access_token=payload.get("access_token", ""),
            expires_in=payload.get("expires_in"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamServiceError(
            message="Identity provider returned no user", service="identity_provider"
        ) from e


class AuthService:
    def __init__(
        self,
        provider: IdentityProviderClient = identity_provider,
        otp_store: ExpiringStore = reset_otp_store,
        mailer: EmailService = email_service,
    ):
        self.provider = provider
        self.otp_store = otp_store
        self.mailer = mailer

    # ── Sessions ──────────────────────────────────────────────────────────

    async def login(self, data: LoginRequest) -> IssuedSession:
        try:
            payload = await self.provider.sign_in(data.email, data.password)
        except UpstreamServiceError as e:
            if e.status_code < 500:
                logger.info("Login rejected for %s: %s", data.email, e.message)
                raise AuthenticationError(message=e.message) from e
            raise
        session = _issued_session(payload)
        logger.info("User %s logged in (remember_me=%s)", session.user_id, data.remember_me)
        return session

    async def signup(self, db: Database, data: SignupRequest) -> IssuedSession:
        payload = await self.provider.sign_up(data.email, data.password)
        session = _issued_session(payload)
        await therapist_repository.create(
            db,
            TherapistCreate(
                id=session.user_id,
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                schools=data.schools,
                district_id=data.district_id,
            ),
        )
        logger.info("Signed up therapist %s", session.user_id)
        return session

    # ── Passwords ─────────────────────────────────────────────────────────

    async def forgot_password(self, data: ForgotPasswordRequest) -> None:
        await self.provider.recover(data.email, data.redirect_to)

    async def update_password(self, user: AuthenticatedUser, password: str) -> None:
        if not user.token:
            raise AuthenticationError(message="A user session is required to change the password")
        await self.provider.update_password(user.token, password)
        logger.info("Password updated for user %s", user.id)

    async def send_reset_otp(self, email: str) -> None:
        code = generate_code()
        await self.otp_store.put(email, code)
        await self.mailer.send_reset_code(email, code)
        logger.info("Reset code issued (ttl=%dm)", settings.reset_otp_ttl_minutes)

    async def reset_password(self, db: Database, data: ResetPasswordRequest) -> None:
        if not await self.otp_store.matches(data.email, data.otp):
            raise ValidationError(message="Invalid or expired OTP", field="otp")
        therapist = await therapist_repository.find_by_email(db, data.email)
        if therapist is None:
            raise NotFoundError(resource="therapist", resource_id=data.email)
        await self.provider.admin_update_password(therapist.id, data.new_password)
        await self.otp_store.discard(data.email)
        logger.info("Password reset via OTP for user %s", therapist.id)

    # ── Account ───────────────────────────────────────────────────────────

    async def delete_account(self, db: Database, user: AuthenticatedUser) -> None:
        await therapist_repository.delete(db, user.id)
        await self.provider.delete_user(user.id)
        logger.info("Deleted account %s", user.id)

    # ── Email verification ────────────────────────────────────────────────

    async def send_verification_code(self, db: Database, user: AuthenticatedUser) -> str:
        email = user.email
        if not email:
            email = (await therapist_repository.get(db, user.id)).email
        code = generate_code()
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.verification_code_ttl_minutes
        )
        await verification_repository.issue(db, user.id, code, expires_at)
        return await self.mailer.send_verification_code(email, code)

    async def verify_code(self, db: Database, user: AuthenticatedUser, code: str) -> bool:
        verified = await verification_repository.consume(db, user.id, code.strip())
        logger.info("Verification for user %s: %s", user.id, "ok" if verified else "rejected")
        return verified


auth_service = AuthService()
