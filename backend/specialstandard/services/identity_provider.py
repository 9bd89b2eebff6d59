"""
SpecialStandard Backend — Identity Provider Client
===================================================

What:  Thin async client for the hosted identity provider (Supabase GoTrue
       REST API): sign-in, sign-up, token verification, password recovery
       and the admin user endpoints.
How:   One short-lived httpx.AsyncClient per call. Every request carries the
       service key as `apikey`, plus `Authorization: Bearer` with either the
       service key or, for user-scoped calls, the user's access token.
Who:   AuthService and the `require_user` dependency.

Error mapping:
    Provider answered with an error   → UpstreamServiceError (4xx relayed)
    Connection failure / timeout      → TransportError (503)

Retries:
    Only token verification (`GET /auth/v1/user`) is retried, and only on
    transport failures. Writes are never retried.
"""

import logging
import re
import uuid
from typing import Any, Dict, Optional

import httpx
from jose import JWTError, jwt
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from specialstandard.config import settings
from specialstandard.exceptions import (
    AuthenticationError,
    TransportError,
    UpstreamServiceError,
    ValidationError,
)
from specialstandard.schemas.auth import AuthenticatedUser

logger = logging.getLogger(__name__)

SERVICE_NAME = "identity_provider"

_SPECIAL_CHARACTERS = re.compile(r"[!@#~$%^&*()+|_.,;<>?/{}\-]")


def validate_password_strength(password: str) -> None:
    """
    At least 8 characters with an uppercase letter, a lowercase letter,
    a digit and one of the accepted special characters.
    """
    if len(password) < 8:
        raise ValidationError(
            message="Weak password: must be at least 8 characters long", field="password"
        )
    if not (
        re.search(r"[A-Z]", password)
        and re.search(r"[a-z]", password)
        and re.search(r"[0-9]", password)
        and _SPECIAL_CHARACTERS.search(password)
    ):
        raise ValidationError(
            message="Weak password: must include uppercase, lowercase, digit and special characters",
            field="password",
        )


def extract_subject(token: str) -> uuid.UUID:
    """
    Read the `sub` claim of an access token without verifying it.

    The provider remains the verifier (see `get_user`); this only rejects
    tokens that cannot possibly be valid before a network round trip.
    """
    try:
        claims = jwt.get_unverified_claims(token)
        return uuid.UUID(str(claims["sub"]))
    except (JWTError, KeyError, ValueError) as e:
        raise AuthenticationError(message="Invalid access token") from e


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default


class IdentityProviderClient:
    """
    Client for the provider's `/auth/v1` endpoints.

    `transport` exists for tests (httpx.MockTransport); production uses
    httpx's default network transport.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.supabase_url).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.supabase_service_role_key
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._transport = transport

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {token or self.service_key}",
            "Content-Type": "application/json",
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            return await client.request(
                method, path, headers=self._headers(token), json=json, params=params
            )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._send(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error("Identity provider unreachable (%s %s): %s", method, path, str(e))
            raise TransportError(context={"service": SERVICE_NAME}) from e

    def _check(self, response: httpx.Response, default: str, ok=(200,)) -> Dict[str, Any]:
        if response.status_code not in ok:
            message = _error_message(response, default)
            logger.warning(
                "Identity provider rejected request: status=%d message=%s",
                response.status_code, message,
            )
            raise UpstreamServiceError(
                message=message, status_code=response.status_code, service=SERVICE_NAME
            )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamServiceError(
                message="Unreadable response from identity provider", service=SERVICE_NAME
            ) from e
        if isinstance(body, dict) and body.get("error"):
            raise UpstreamServiceError(
                message=_error_message(response, default), status_code=400, service=SERVICE_NAME
            )
        return body if isinstance(body, dict) else {}

    # ── Public endpoints ──────────────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Password grant. Returns the provider's token payload."""
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._check(response, "Invalid credentials")

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        validate_password_strength(password)
        response = await self._request(
            "POST", "/auth/v1/signup", json={"email": email, "password": password}
        )
        return self._check(response, "Signup failed")

    async def recover(self, email: str, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        response = await self._request(
            "POST", "/auth/v1/recover", json={"email": email}, params=params
        )
        self._check(response, "Password recovery failed")

    # ── User-scoped endpoints ─────────────────────────────────────────────

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _fetch_user(self, token: str) -> httpx.Response:
        return await self._send("GET", "/auth/v1/user", token=token)

    async def get_user(self, token: str) -> AuthenticatedUser:
        """Ask the provider who `token` belongs to. 401 when it does not know."""
        try:
            response = await self._fetch_user(token)
        except httpx.TransportError as e:
            logger.error("Token verification failed after retries: %s", str(e))
            raise TransportError(context={"service": SERVICE_NAME}) from e
        if response.status_code in (401, 403):
            raise AuthenticationError(message="Invalid or expired session")
        body = self._check(response, "Token verification failed")
        try:
            return AuthenticatedUser(id=body["id"], email=body.get("email"), token=token)
        except (KeyError, ValueError) as e:
            raise UpstreamServiceError(
                message="Identity provider returned no user", service=SERVICE_NAME
            ) from e

    async def update_password(self, token: str, password: str) -> None:
        validate_password_strength(password)
        response = await self._request(
            "PUT", "/auth/v1/user", token=token, json={"password": password}
        )
        self._check(response, "Password update failed")

    # ── Admin endpoints (service key) ─────────────────────────────────────

    async def admin_update_password(self, user_id: uuid.UUID, password: str) -> None:
        validate_password_strength(password)
        response = await self._request(
            "PUT", f"/auth/v1/admin/users/{user_id}", json={"password": password}
        )
        self._check(response, "Password reset failed")

    async def delete_user(self, user_id: uuid.UUID) -> None:
        response = await self._request("DELETE", f"/auth/v1/admin/users/{user_id}")
        self._check(response, "Failed to delete account", ok=(200, 204))


identity_provider = IdentityProviderClient()
