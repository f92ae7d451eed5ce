"""Submission workflow service layer.

A submission starts ``pending`` and moves exactly once, to ``approved`` or
``rejected``. Both transitions are conditional writes (``WHERE status =
'pending'``), so two concurrent reviewers cannot both win.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.security import Principal
from app.exceptions.base import UpstreamFailureError
from app.exceptions.file import StoredObjectMissingError
from app.exceptions.submission import (
    SubmissionAlreadyProcessedError,
    SubmissionNotFoundError,
)
from app.schemas.submission import DEFAULT_REJECTION_REASON, SubmissionCreate
from app.shared.upload_policy import (
    SUBMISSIONS_NAMESPACE,
    ValidatedUpload,
    generate_storage_key,
    sanitize_text,
    validate_display_name,
)
from app.storage import ObjectStore, StorageError
from models.base import utcnow
from models.file import FileRecord
from models.submission import Submission, SubmissionStatus

logger = logging.getLogger(__name__)


class SubmissionService:
    """Service class for the student submission workflow."""

    def __init__(self, db: AsyncSession, storage: ObjectStore):
        self.db = db
        self.storage = storage

    async def submit(self, metadata: SubmissionCreate, upload: ValidatedUpload) -> Submission:
        """Store the blob, then a pending submission record."""

        storage_key = generate_storage_key(SUBMISSIONS_NAMESPACE, upload.extension)
        try:
            await self.storage.put(
                storage_key, upload.data, upload.content_type, original_name=upload.filename
            )
        except StorageError as e:
            raise UpstreamFailureError("Error storing submitted file", cause=e)

        submission = Submission(
            student_name=metadata.student_name,
            student_email=str(metadata.student_email),
            storage_key=storage_key,
            display_name=upload.filename,
            public_url=self.storage.public_url(storage_key),
            size_bytes=upload.size_bytes,
            mime_type=upload.content_type,
            description=metadata.description,
            category=metadata.category,
            status=SubmissionStatus.pending,
        )

        try:
            self.db.add(submission)
            await self.db.commit()
            await self.db.refresh(submission)
        except SQLAlchemyError as e:
            await self.db.rollback()
            await self.storage.discard(storage_key)
            raise UpstreamFailureError("Error saving submission info", cause=e)

        logger.info("Submission %s received from %s", submission.id, submission.student_email)
        return submission

    async def list_pending(self) -> List[Submission]:
        """Pending submissions, newest first."""
        stmt = (
            select(Submission)
            .where(Submission.status == SubmissionStatus.pending)
            .order_by(desc(Submission.created_at))
        )
        return await self._fetch_all(stmt)

    async def list_all(self) -> List[Submission]:
        """Every submission regardless of status, newest first."""
        stmt = select(Submission).order_by(desc(Submission.created_at))
        return await self._fetch_all(stmt)

    async def get_submission(self, submission_id: UUID) -> Submission:
        try:
            result = await self.db.execute(select(Submission).where(Submission.id == submission_id))
            submission = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise UpstreamFailureError("Database error", cause=e)

        if not submission:
            raise SubmissionNotFoundError()
        return submission

    async def get_download_target(self, submission_id: UUID) -> str:
        """URL for the submission's blob; 404 once the blob is gone.

        An approved submission shares its blob with the published file, so
        deleting that file leaves this record pointing at nothing.
        """
        submission = await self.get_submission(submission_id)
        try:
            if not await self.storage.exists(submission.storage_key):
                raise StoredObjectMissingError(submission.storage_key)
            return await self.storage.download_url(
                submission.storage_key, submission.display_name
            )
        except StorageError as e:
            raise UpstreamFailureError("Error preparing download", cause=e)

    async def approve(self, principal: Principal, submission_id: UUID) -> FileRecord:
        """Publish a pending submission as a file record owned by ``principal``.

        The status change and the new record are committed in one transaction.
        The record references the submission's blob instead of copying it.
        """
        submission = await self.get_submission(submission_id)
        self._ensure_pending(submission)

        now = utcnow()
        stmt = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == SubmissionStatus.pending,
            )
            .values(status=SubmissionStatus.approved, approved_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )

        record = FileRecord(
            owner_id=principal.id,
            storage_key=submission.storage_key,
            display_name=submission.display_name,
            public_url=submission.public_url,
            size_bytes=submission.size_bytes,
            mime_type=submission.mime_type,
            category=submission.category,
            source_submission_id=submission.id,
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                await self.db.rollback()
                raise SubmissionAlreadyProcessedError()

            self.db.add(record)
            await self.db.commit()
        except IntegrityError:
            # A concurrent approval already published this submission.
            await self.db.rollback()
            raise SubmissionAlreadyProcessedError()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error approving submission", cause=e)

        await self.db.refresh(submission)
        await self.db.refresh(record)
        logger.info(
            "Submission %s approved by %s as file %s", submission_id, principal.id, record.id
        )
        return record

    async def reject(self, submission_id: UUID, reason: Optional[str] = None) -> Submission:
        """Reject a pending submission and delete its blob.

        The rejection is committed first. If the blob cannot be deleted the
        submission is flagged for the purge task instead of failing the request.
        """
        submission = await self.get_submission(submission_id)
        self._ensure_pending(submission)

        rejection_reason = sanitize_text(reason, 500) or DEFAULT_REJECTION_REASON
        now = utcnow()
        stmt = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == SubmissionStatus.pending,
            )
            .values(
                status=SubmissionStatus.rejected,
                rejection_reason=rejection_reason,
                rejected_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                await self.db.rollback()
                raise SubmissionAlreadyProcessedError()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error rejecting submission", cause=e)

        try:
            await self.storage.delete(submission.storage_key)
        except StorageError as e:
            logger.warning(
                "Blob for rejected submission %s not deleted, queued for purge: %s",
                submission_id,
                e,
            )
            await self._mark_purge_pending(submission_id)

        await self.db.refresh(submission)
        logger.info("Submission %s rejected: %s", submission_id, rejection_reason)
        return submission

    async def rename(self, submission_id: UUID, new_name: str) -> Submission:
        """Change the display name. Allowed in every status."""
        name = validate_display_name(new_name)
        submission = await self.get_submission(submission_id)

        submission.display_name = name
        try:
            await self.db.commit()
            await self.db.refresh(submission)
            return submission
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error renaming submission", cause=e)

    async def purge_rejected_blobs(self) -> Dict[str, Any]:
        """Retry blob deletion for rejected submissions flagged at rejection time."""
        stmt = select(Submission).where(
            Submission.status == SubmissionStatus.rejected,
            Submission.blob_purge_pending.is_(True),
        )
        pending = await self._fetch_all(stmt)

        purged = 0
        for submission in pending:
            try:
                await self.storage.delete(submission.storage_key)
            except StorageError as e:
                logger.warning("Purge of %s still failing: %s", submission.storage_key, e)
                continue
            submission.blob_purge_pending = False
            purged += 1

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpstreamFailureError("Error recording purged blobs", cause=e)

        return {"checked": len(pending), "purged": purged, "failed": len(pending) - purged}

    # Private helper methods
    @staticmethod
    def _ensure_pending(submission: Submission) -> None:
        if submission.status != SubmissionStatus.pending:
            raise SubmissionAlreadyProcessedError()

    async def _mark_purge_pending(self, submission_id: UUID) -> None:
        stmt = (
            update(Submission)
            .where(Submission.id == submission_id)
            .values(blob_purge_pending=True)
            .execution_options(synchronize_session=False)
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Could not flag submission %s for purge: %s", submission_id, e)

    async def _fetch_all(self, stmt) -> List[Submission]:
        try:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise UpstreamFailureError("Database error", cause=e)
