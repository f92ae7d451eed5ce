"""
File record model for published study materials.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Uuid

from .base import BaseModel


class FileRecord(BaseModel):
    """
    Represents a published, publicly listed file owned by the admin.

    Every record points at exactly one object store entry through
    ``storage_key``; the two are created and removed together.
    """

    __tablename__ = "files"

    owner_id = Column(String(100), nullable=False, index=True)
    storage_key = Column(String(500), nullable=False)
    display_name = Column(String(255), nullable=False)
    public_url = Column(String(1000), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    category = Column(String(100))

    # Set when the record was published by approving a student submission.
    source_submission_id = Column(
        Uuid(as_uuid=True), ForeignKey("submissions.id", ondelete="SET NULL"), unique=True
    )

    __table_args__ = (Index("idx_files_owner_created", "owner_id", "created_at"),)
