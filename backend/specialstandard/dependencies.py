"""
SpecialStandard Backend — Request Dependencies
===============================================

What:  `require_user`, the FastAPI dependency that authenticates a request.
How:   Takes the access token from `Authorization: Bearer ...` or, failing
       that, the `jwt` cookie set at login. Tokens without a readable `sub`
       claim are rejected locally; everything else is confirmed with the
       identity provider. The caller's id lands on `request.state.user_id`
       (picked up by the access log).

Test mode:
    With `AUTH_DISABLED=true` every request is the fixed
    `AUTH_TEST_USER_ID` and the provider is never contacted.
"""

import logging
import uuid
from typing import Optional

from fastapi import Request

from specialstandard.config import settings
from specialstandard.exceptions import AuthenticationError
from specialstandard.schemas.auth import AuthenticatedUser
from specialstandard.services.identity_provider import extract_subject, identity_provider

logger = logging.getLogger(__name__)

JWT_COOKIE = "jwt"
USER_ID_COOKIE = "userID"


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(JWT_COOKIE) or None


async def require_user(request: Request) -> AuthenticatedUser:
    if settings.auth_disabled:
        user = AuthenticatedUser(id=uuid.UUID(settings.auth_test_user_id))
        request.state.user_id = user.id
        return user

    token = bearer_token(request)
    if token is None:
        raise AuthenticationError(message="No authentication token found")

    subject = extract_subject(token)
    user = await identity_provider.get_user(token)
    if user.id != subject:
        logger.warning("Token subject %s does not match provider user %s", subject, user.id)
        raise AuthenticationError(message="Invalid access token")

    request.state.user_id = user.id
    return user
