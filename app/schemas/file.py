"""File record schemas for request/response serialization."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema


class RenameRequest(BaseSchema):
    """Schema for renaming a file record or a submission."""

    new_name: str = Field(..., alias="newName", max_length=255)

    @field_validator("new_name")
    @classmethod
    def validate_new_name(cls, v: str) -> str:
        """Validate and clean the new display name."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty or only whitespace")
        return v


class FileRecordResponse(BaseModelSchema):
    """Schema for file record response."""

    owner_id: str
    display_name: str
    public_url: str
    size_bytes: int
    mime_type: str
    category: str | None = None
    source_submission_id: UUID | None = None


class FileListResponse(BaseSchema):
    """Schema for file list response."""

    files: list[FileRecordResponse]
    total: int
