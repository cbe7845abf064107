"""
All-Server Backend — Shared Response Schemas
==============================================

What:  Envelope models reused by every route module.
How:   Referenced in route `responses=` declarations so the generated
       OpenAPI document at /api-docs describes error bodies too.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body returned for every 4xx/5xx response.

    Example:
        {"message": "用户不存在"}
    """
    message: str = Field(description="Human-readable error description")


class MessageResponse(BaseModel):
    """Success body for operations that only report an outcome."""
    message: str = Field(description="Human-readable success message")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
