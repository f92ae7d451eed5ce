"""
Submission model for student-contributed files awaiting review.
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Integer, String, Text

from .base import BaseModel


class SubmissionStatus(str, enum.Enum):
    """Review state of a submission. ``approved`` and ``rejected`` are terminal."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Submission(BaseModel):
    """
    Represents a file submitted by a student.

    :ivar status: One of pending, approved, rejected.
    :ivar blob_purge_pending: True when the submission was rejected but its
        blob could not be deleted yet.
    """

    __tablename__ = "submissions"

    student_name = Column(String(100), nullable=False)
    student_email = Column(String(100), nullable=False)
    storage_key = Column(String(500), nullable=False)
    display_name = Column(String(255), nullable=False)
    public_url = Column(String(1000), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    description = Column(Text)
    category = Column(String(50), nullable=False, default="other")

    status = Column(
        Enum(SubmissionStatus, name="submission_status", native_enum=False, length=20),
        nullable=False,
        default=SubmissionStatus.pending,
    )
    rejection_reason = Column(String(500))
    approved_at = Column(DateTime(timezone=True))
    rejected_at = Column(DateTime(timezone=True))
    blob_purge_pending = Column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("idx_submissions_status_created", "status", "created_at"),)

    @property
    def submitted_at(self):
        return self.created_at
