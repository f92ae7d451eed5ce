"""
Unit tests for the rejected blob purge task.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.tasks.storage_tasks import _purge_rejected_blobs_async, purge_rejected_blobs_task


def test_task_returns_counts():
    counts = {"checked": 2, "purged": 2, "failed": 0}

    with patch(
        "app.tasks.storage_tasks._purge_rejected_blobs_async", AsyncMock(return_value=counts)
    ):
        result = purge_rejected_blobs_task.apply().get()

    assert result == counts


@pytest.mark.asyncio
async def test_purge_clears_flag_in_database(test_db, rejected_submission):
    result = await _purge_rejected_blobs_async()

    assert result == {"checked": 1, "purged": 1, "failed": 0}
    await test_db.refresh(rejected_submission)
    assert rejected_submission.blob_purge_pending is False
