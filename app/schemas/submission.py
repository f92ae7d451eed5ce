"""Submission schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from app.core.config import settings
from app.shared.upload_policy import sanitize_text
from models.submission import SubmissionStatus

from .base import BaseModelSchema, BaseSchema

DEFAULT_CATEGORY = "other"
DEFAULT_REJECTION_REASON = "No reason provided"


class SubmissionCreate(BaseSchema):
    """Schema for the metadata sent alongside a student submission."""

    student_name: str = Field(..., min_length=1, max_length=settings.max_student_name_length)
    student_email: EmailStr = Field(..., max_length=settings.max_email_length)
    description: str | None = None
    category: str = DEFAULT_CATEGORY

    @field_validator("student_name", mode="before")
    @classmethod
    def validate_student_name(cls, v):
        """Trim the name; blank names are rejected."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Student name cannot be empty or only whitespace")
        return v

    @field_validator("student_email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def sanitize_description(cls, v):
        if v is None:
            return None
        return sanitize_text(v, settings.max_description_length) or None

    @field_validator("category", mode="before")
    @classmethod
    def sanitize_category(cls, v):
        return sanitize_text(v, settings.max_submission_category_length) or DEFAULT_CATEGORY


class RejectRequest(BaseSchema):
    """Schema for rejecting a submission."""

    reason: str | None = Field(default=None, validate_default=True)

    @field_validator("reason", mode="before")
    @classmethod
    def sanitize_reason(cls, v):
        return sanitize_text(v, settings.max_description_length) or DEFAULT_REJECTION_REASON


class SubmissionResponse(BaseModelSchema):
    """Schema for submission response."""

    student_name: str
    student_email: str
    display_name: str
    size_bytes: int
    mime_type: str
    description: str | None = None
    category: str
    status: SubmissionStatus
    rejection_reason: str | None = None
    submitted_at: datetime
    approved_at: datetime | None = None
    rejected_at: datetime | None = None


class SubmissionListResponse(BaseSchema):
    """Schema for submission list response."""

    submissions: list[SubmissionResponse]
    total: int
