"""
SpecialStandard Backend — Shared Response Schemas
==================================================

What:  Error, health and message envelopes shared by every route.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body of every error response, produced by the handlers in main.py.

    Example:
        {
            "error": "not_found",
            "message": "student with ID '...' was not found",
            "details": {"resource": "student"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable explanation")
    details: Optional[Dict[str, Any]] = Field(default=None)
    request_id: Optional[str] = Field(default=None)


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
