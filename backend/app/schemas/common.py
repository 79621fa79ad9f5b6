"""
DiveLog Backend: Shared Response Schemas
========================================

Error and health payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example (duplicate dive):
        {
            "error": "conflict",
            "message": "A dive already exists for this date and location",
            "details": {"date": "2024-03-01T10:00:00", "location": "Blue Hole"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health; HTTP 503 accompanies status='unhealthy'."""
    status: str = Field(description="healthy or unhealthy")
    service: str = Field(default="divelog-backend")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
