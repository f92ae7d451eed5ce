"""
Declarative base and the columns every stored record shares.

Records are keyed by random UUIDs so identifiers handed out in public URLs
cannot be enumerated. Timestamps are timezone-aware and always UTC.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """
    Abstract parent of the file and submission tables.

    :ivar id: Random identifier, native ``uuid`` on PostgreSQL and CHAR(32) elsewhere.
    :type id: uuid.UUID
    :ivar created_at: When the record was written; doubles as the submission time.
    :type created_at: datetime
    :ivar updated_at: Last modification, refreshed on every ORM update.
    :type updated_at: datetime
    """

    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
