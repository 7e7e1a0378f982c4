"""
CourseHub Backend: Shared Pydantic Schemas
==========================================

What:  Response envelopes, populated references and error/health models
       shared by every route module.
How:   Every successful response is wrapped in an envelope:

           {"success": true, "data": ...}
           {"success": true, "data": [...], "pagination": {...}}
           {"success": true, "message": "..."}

       Generic models keep the OpenAPI document typed per endpoint.
"""

import uuid
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class Pagination(BaseModel):
    """
    Page/limit pagination state.

    pages = ceil(total / limit); a page past the end returns an empty list
    with the same totals.
    """
    total: int = Field(description="Number of items matching the filters")
    page: int = Field(description="Current page (1-based)")
    pages: int = Field(description="Total number of pages")


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Populated references
# ══════════════════════════════════════════════════════════════════════════


class UserRef(BaseModel):
    """Author / participant as embedded in forum and chat payloads."""
    id: uuid.UUID
    name: str
    email: str
    role: str

    model_config = {"from_attributes": True}


class CourseRef(BaseModel):
    id: uuid.UUID
    title: str

    model_config = {"from_attributes": True}


class Attachment(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=2048)


# ══════════════════════════════════════════════════════════════════════════
# Error & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "forbidden",
            "message": "You are not authorized to update this post",
            "request_id": "1f2e3d4c"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
