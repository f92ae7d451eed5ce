"""File record service layer with business logic."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.config import settings
from app.core.security import Principal
from app.exceptions.base import UpstreamFailureError
from app.exceptions.file import (
    FilePermissionError,
    FileRecordNotFoundError,
    StoredObjectMissingError,
)
from app.shared.upload_policy import (
    UPLOADS_NAMESPACE,
    ValidatedUpload,
    generate_storage_key,
    sanitize_text,
    validate_display_name,
)
from app.storage import ObjectStore, StorageError
from models.file import FileRecord

logger = logging.getLogger(__name__)


class FileService:
    """Service class for published file records."""

    def __init__(self, db: AsyncSession, storage: ObjectStore):
        self.db = db
        self.storage = storage

    async def upload_file(
        self,
        principal: Principal,
        upload: ValidatedUpload,
        category: Optional[str] = None,
    ) -> FileRecord:
        """Store the blob, then the record. A failed record write removes the blob again."""

        storage_key = generate_storage_key(UPLOADS_NAMESPACE, upload.extension)
        try:
            await self.storage.put(
                storage_key, upload.data, upload.content_type, original_name=upload.filename
            )
        except StorageError as e:
            raise UpstreamFailureError("Error storing uploaded file", cause=e)

        record = FileRecord(
            owner_id=principal.id,
            storage_key=storage_key,
            display_name=upload.filename,
            public_url=self.storage.public_url(storage_key),
            size_bytes=upload.size_bytes,
            mime_type=upload.content_type,
            category=sanitize_text(category, settings.max_file_category_length) or None,
        )

        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            await self.storage.discard(storage_key)
            raise UpstreamFailureError("Error saving file info", cause=e)

        logger.info("File %s uploaded by %s (%d bytes)", record.id, principal.id, record.size_bytes)
        return record

    async def list_files_by_owner(self, principal: Principal) -> List[FileRecord]:
        """Files uploaded by the principal, newest first."""
        stmt = (
            select(FileRecord)
            .where(FileRecord.owner_id == principal.id)
            .order_by(desc(FileRecord.created_at))
        )
        return await self._fetch_all(stmt)

    async def list_public_files(self) -> List[FileRecord]:
        """The public catalog, newest first."""
        stmt = select(FileRecord).order_by(desc(FileRecord.created_at))
        return await self._fetch_all(stmt)

    async def get_file(self, file_id: UUID) -> FileRecord:
        record = await self._get_file_by_id(file_id)
        if not record:
            raise FileRecordNotFoundError()
        return record

    async def get_download_target(self, file_id: UUID) -> str:
        """URL the caller should redirect to instead of streaming bytes."""
        record = await self.get_file(file_id)
        try:
            if not await self.storage.exists(record.storage_key):
                raise StoredObjectMissingError(record.storage_key)
            return await self.storage.download_url(record.storage_key, record.display_name)
        except StorageError as e:
            raise UpstreamFailureError("Error preparing download", cause=e)

    async def find_by_storage_key(self, storage_key: str) -> Optional[FileRecord]:
        """The published record for a blob, if any."""
        try:
            result = await self.db.execute(
                select(FileRecord).where(FileRecord.storage_key == storage_key).limit(1)
            )
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise UpstreamFailureError("Database error", cause=e)

    async def delete_file(self, principal: Principal, file_id: UUID) -> None:
        """Delete record and blob together.

        The record deletion is flushed but only committed once the blob is gone,
        so a storage failure leaves both in place.
        """
        record = await self._get_owned_file(principal, file_id)
        storage_key = record.storage_key

        try:
            await self.db.delete(record)
            await self.db.flush()
            await self.storage.delete(storage_key)
            await self.db.commit()
        except StorageError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error deleting file", cause=e)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Record delete for file %s failed after blob handling: %s", file_id, e)
            raise UpstreamFailureError("Error deleting file", cause=e)

        logger.info("File %s deleted by %s", file_id, principal.id)

    async def rename_file(self, principal: Principal, file_id: UUID, new_name: str) -> FileRecord:
        """Change the display name only."""
        name = validate_display_name(new_name)
        record = await self._get_owned_file(principal, file_id)

        record.display_name = name
        try:
            await self.db.commit()
            await self.db.refresh(record)
            return record
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error renaming file", cause=e)

    # Private helper methods
    async def _get_file_by_id(self, file_id: UUID) -> Optional[FileRecord]:
        try:
            result = await self.db.execute(select(FileRecord).where(FileRecord.id == file_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise UpstreamFailureError("Database error", cause=e)

    async def _get_owned_file(self, principal: Principal, file_id: UUID) -> FileRecord:
        record = await self.get_file(file_id)
        if record.owner_id != principal.id:
            raise FilePermissionError()
        return record

    async def _fetch_all(self, stmt) -> List[FileRecord]:
        try:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise UpstreamFailureError("Database error", cause=e)
