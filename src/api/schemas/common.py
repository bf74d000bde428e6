"""Common API schemas shared across endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response.

    Args:
        error: Error type identifier (e.g., "forbidden", "not_found")
        message: Human-readable error description
        details: Optional additional error context
        request_id: Optional request ID for tracing
    """

    error: str
    message: str
    details: Optional[dict] = None
    request_id: Optional[str] = None


class ServiceStatus(BaseModel):
    """Dependency health: "connected", "unavailable", or "error"."""

    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response with service status."""

    status: str
    version: str = "0.1.0"
    services: dict[str, ServiceStatus] = Field(default_factory=dict)
