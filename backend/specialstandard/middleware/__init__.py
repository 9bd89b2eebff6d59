"""
SpecialStandard Backend — Middleware Package
=============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so every log line of the request, the access log
    line included, carries the same correlation id.
"""
