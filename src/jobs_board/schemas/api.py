"""Response schemas for the proxy API's own endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "2.0.0"
    job_store: str = "unknown"
    chain: str = "unknown"


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    details: str | None = None
