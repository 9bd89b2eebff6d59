"""
SpecialStandard Backend — Request ID Middleware
================================================

What:  Assigns each request a short correlation id and returns it in the
       `X-Request-ID` response header.
How:   Uses the client's `X-Request-ID` when sent, otherwise the first eight
       characters of a fresh UUID. The id is stored in a ContextVar (read by
       loggers and error handlers) and on `request.state`.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# coroutine-local: concurrent requests share a thread
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
