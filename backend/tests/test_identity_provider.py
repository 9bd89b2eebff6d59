"""
SpecialStandard Backend — Identity Provider Client Tests
=========================================================

What:  Tests for IdentityProviderClient against httpx.MockTransport.
How:   Each test builds a client with a handler that inspects the request
       and returns a canned provider response. Retries run without waits.

What we test:
    ✅ Password strength rules
    ✅ Token subject extraction (unverified)
    ✅ Provider 4xx relayed, 5xx → 502, connection failure → 503
    ✅ Token verification retried on transport errors only
"""

import json
import uuid
from unittest.mock import patch

import httpx
import pytest
from jose import jwt
from tenacity import wait_none

from specialstandard.exceptions import (
    AuthenticationError,
    TransportError,
    UpstreamServiceError,
    ValidationError,
)
from specialstandard.services.identity_provider import (
    IdentityProviderClient,
    extract_subject,
    validate_password_strength,
)


def make_client(handler):
    return IdentityProviderClient(
        base_url="https://idp.test",
        service_key="service-key",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


class TestPasswordStrength:

    @pytest.mark.parametrize("password", ["Sh0rt!", "alllowercase1!", "NoDigits!!", "NoSpecial123"])
    def test_weak_passwords_rejected(self, password):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_strength(password)
        assert exc_info.value.field == "password"

    def test_strong_password_accepted(self):
        validate_password_strength("Str0ng-Pass")


class TestExtractSubject:

    def test_reads_sub_claim(self):
        user_id = uuid.uuid4()
        token = jwt.encode({"sub": str(user_id)}, "not-the-real-secret", algorithm="HS256")
        assert extract_subject(token) == user_id

    @pytest.mark.parametrize("token", ["not-a-jwt", jwt.encode({"sub": "nope"}, "k", algorithm="HS256")])
    def test_unreadable_token_rejected(self, token):
        with pytest.raises(AuthenticationError):
            extract_subject(token)


class TestSignIn:

    @pytest.mark.asyncio
    async def test_password_grant_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers["apikey"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"access_token": "tok", "user": {"id": str(uuid.uuid4())}})

        payload = await make_client(handler).sign_in("ada@example.com", "pw")

        assert payload["access_token"] == "tok"
        assert seen["url"] == "https://idp.test/auth/v1/token?grant_type=password"
        assert seen["apikey"] == "service-key"
        assert seen["body"] == {"email": "ada@example.com", "password": "pw"}

    @pytest.mark.asyncio
    async def test_provider_client_error_is_relayed(self):
        def handler(request):
            return httpx.Response(400, json={"error_description": "Invalid login credentials"})

        with pytest.raises(UpstreamServiceError) as exc_info:
            await make_client(handler).sign_in("ada@example.com", "wrong")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid login credentials"

    @pytest.mark.asyncio
    async def test_provider_server_error_is_bad_gateway(self):
        with pytest.raises(UpstreamServiceError) as exc_info:
            await make_client(lambda request: httpx.Response(500, text="boom")).sign_in("a@b.co", "pw")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            await make_client(handler).sign_in("a@b.co", "pw")


class TestGetUser:

    @pytest.mark.asyncio
    async def test_returns_user_with_token(self):
        user_id = uuid.uuid4()

        def handler(request):
            assert request.headers["Authorization"] == "Bearer user-token"
            return httpx.Response(200, json={"id": str(user_id), "email": "ada@example.com"})

        user = await make_client(handler).get_user("user-token")
        assert user.id == user_id
        assert user.token == "user-token"

    @pytest.mark.asyncio
    async def test_unknown_token_is_unauthorized(self):
        with pytest.raises(AuthenticationError):
            await make_client(lambda request: httpx.Response(401, json={"msg": "bad jwt"})).get_user("t")

    @pytest.mark.asyncio
    async def test_transport_errors_retried_then_raised(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with patch.object(IdentityProviderClient._fetch_user.retry, "wait", wait_none()):
            with pytest.raises(TransportError):
                await make_client(handler).get_user("t")
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_recovers_after_one_transport_error(self):
        user_id = uuid.uuid4()
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json={"id": str(user_id)})

        with patch.object(IdentityProviderClient._fetch_user.retry, "wait", wait_none()):
            user = await make_client(handler).get_user("t")
        assert user.id == user_id
        assert len(attempts) == 2


class TestAdmin:

    @pytest.mark.asyncio
    async def test_delete_user_accepts_no_content(self):
        user_id = uuid.uuid4()

        def handler(request):
            assert request.method == "DELETE"
            assert request.url.path == f"/auth/v1/admin/users/{user_id}"
            return httpx.Response(204)

        await make_client(handler).delete_user(user_id)

    @pytest.mark.asyncio
    async def test_weak_password_never_reaches_provider(self):
        def handler(request):
            raise AssertionError("provider should not be called")

        with pytest.raises(ValidationError):
            await make_client(handler).admin_update_password(uuid.uuid4(), "weak")
