"""
Recortes Backend - Shared Schemas
==================================

What:  Identity passed from the auth layer to services, the error envelope,
       and the health report.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    The authenticated caller.

    Only the Identity Resolver constructs this, after the token was verified
    and the local user resolved. Services receive it as an explicit argument;
    there is no "current user" global.
    """

    id: uuid.UUID
    email: str
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class FieldIssue(BaseModel):
    field: str = Field(description="Dotted path of the offending input, e.g. body.sku")
    issue: str = Field(description="What is wrong with it")


class ErrorResponse(BaseModel):
    """
    Standardized error format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "body.sku", "issue": "SKU is required"}],
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldIssue]] = Field(default=None, description="Field-level validation issues")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status for GET /health."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Object storage: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
