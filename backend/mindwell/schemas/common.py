"""
MindWell Backend — Shared Pydantic Schemas
==========================================

What:  Base model for every response schema plus the error and health shapes.
How:   `CamelModel` serializes snake_case attributes as camelCase JSON keys
       (`user_id` → `userId`) and reads the frozen store records directly
       (from_attributes=True), so routes return records without copying.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Forbidden",
            "request_id": "5f1c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Returned by GET /health for monitoring and load balancer health checks."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Entity store: connected, disconnected")
    payments: str = Field(
        description="Payment processor: configured, unconfigured, circuit_open"
    )
    uptime_seconds: float = Field(description="Seconds since service started")
