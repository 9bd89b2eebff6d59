"""
SpecialStandard Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers
       and returns the app; `app` is the module-level instance uvicorn loads
       (uvicorn specialstandard.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌───────────┐   │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│   CORS    │   │
    │  └──────────┘ └──────────┘ └──────┘ └───────────┘   │
    │                                                     │
    │  Routes (/api/v1, require_user unless public):      │
    │  auth, verification, themes, therapists, resources, │
    │  students, sessions, session_students, games,       │
    │  reference, storage, health; /health also at root   │
    │                                                     │
    │  Exception Handlers:                                │
    │  SpecialStandardError → its status │ 422 → 400      │
    │  anything else → 500                                │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check (logged, not fatal)
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from specialstandard import __version__
from specialstandard.config import settings
from specialstandard.database import dispose_engine
from specialstandard.exceptions import SpecialStandardError
from specialstandard.middleware.logging import RequestLoggingMiddleware
from specialstandard.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from specialstandard.routes import (
    auth,
    games,
    health,
    reference,
    resources,
    session_students,
    sessions,
    storage,
    students,
    themes,
    therapists,
    verification,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    The access log (logger `specialstandard.access`) carries the request id
    in its message; third-party libraries are held at WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "botocore", "boto3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SpecialStandard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # not fatal: the affected integrations fail when first used
        logger.error("Configuration error: %s", str(e))

    if settings.auth_disabled:
        logger.warning("AUTH_DISABLED is set; every request runs as %s", settings.auth_test_user_id)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SpecialStandard Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception taxonomy to HTTP responses.

        SpecialStandardError     → exc.status_code / exc.error_code
        RequestValidationError   → 400 validation_error
        Exception (fallback)     → 500, stack trace logged only

    Context is returned for client errors; for 5xx it is logged and the
    client gets the generic message.
    """

    @app.exception_handler(SpecialStandardError)
    async def handle_application_error(request: Request, exc: SpecialStandardError):
        rid = request_id_var.get("")
        status = exc.status_code
        if status >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context
            )
            details = exc.context if status in (502, 503) and "service" in exc.context else None
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            details = exc.context
        return JSONResponse(
            status_code=status,
            content=_error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Request validation failed", {"errors": errors}),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="SpecialStandard API",
        description=(
            "Backend for speech therapy practices: therapists, students, sessions, "
            "ratings, teaching resources and therapy games."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    for module in (
        auth,
        verification,
        themes,
        therapists,
        resources,
        students,
        sessions,
        session_students,
        games,
        reference,
        storage,
    ):
        app.include_router(module.router)

    return app


app = create_app()
