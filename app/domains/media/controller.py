"""Serves blobs from the local object store.

Only mounted when STORAGE_BACKEND is ``local``. Blobs of published files are
public; any other blob, such as a submission awaiting review, is served only
with the signed token carried by a download redirect.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_db, get_storage
from app.domains.file.service import FileService
from app.exceptions.file import FileRecordNotFoundError, StoredObjectMissingError
from app.storage import LocalObjectStore, ObjectStore, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.local_storage_url_prefix, tags=["media"])


@router.get("/{storage_key:path}", include_in_schema=False)
async def serve_local_object(
    storage_key: str,
    token: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    if not isinstance(storage, LocalObjectStore):
        raise FileRecordNotFoundError()

    grant = storage.verify_download_token(storage_key, token) if token else None
    if grant is not None:
        filename = grant.get("filename")
    else:
        record = await FileService(db, storage).find_by_storage_key(storage_key)
        if record is None:
            raise FileRecordNotFoundError()
        filename = record.display_name

    try:
        path = storage.path_for(storage_key)
        found = await storage.exists(storage_key)
    except StorageError:
        raise FileRecordNotFoundError() from None
    if not found:
        logger.warning("Blob %s is referenced but missing from local storage", storage_key)
        raise StoredObjectMissingError(storage_key)

    return FileResponse(path, filename=filename)
