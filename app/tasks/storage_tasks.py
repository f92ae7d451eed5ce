"""Celery tasks for object store housekeeping."""

import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import NullPool

from app.celery_app import celery_app
from app.database import DB_URL, build_engine
from app.domains.submission.service import SubmissionService
from app.storage import get_object_store

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.storage_tasks.purge_rejected_blobs_task", bind=True)
def purge_rejected_blobs_task(self) -> dict[str, Any]:
    """Delete blobs of rejected submissions that could not be removed at rejection time.

    Returns:
        Counts of checked, purged and still-failing submissions
    """
    logger.info("Starting rejected blob purge (task %s)", self.request.id)

    try:
        result = asyncio.run(_purge_rejected_blobs_async())
    except Exception as e:
        logger.error("Rejected blob purge failed: %s", e)
        raise self.retry(exc=e, countdown=60, max_retries=3)

    if result["failed"]:
        logger.warning("Rejected blob purge left %d blobs for the next run", result["failed"])
    logger.info("Rejected blob purge completed: %s", result)
    return result


async def _purge_rejected_blobs_async() -> dict[str, Any]:
    # Each asyncio.run() gets its own loop, so connections cannot be pooled across runs.
    engine = build_engine(DB_URL, poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    try:
        async with session_factory() as session:
            service = SubmissionService(session, get_object_store())
            return await service.purge_rejected_blobs()
    finally:
        await engine.dispose()
