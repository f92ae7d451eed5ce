"""Shared schema bases and the response envelopes used by every router."""

from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Accepts camelCase aliases on input and reads ORM attributes."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BaseModelSchema(BaseSchema):
    """Fields every persisted record exposes."""

    id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None


class ResponseSchema(BaseSchema):
    """Success envelope wrapping a single payload."""

    status: Literal["success"] = "success"
    message: Optional[str] = None
    data: Optional[Any] = None


class ErrorResponse(BaseSchema):
    """Envelope returned by the global exception handlers."""

    status: Literal["error"] = "error"
    message: str
    error_code: str
    details: Optional[Any] = None
    timestamp: datetime
    request_id: Optional[str] = None


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    404: {"model": ErrorResponse, "description": "Record not found"},
}
