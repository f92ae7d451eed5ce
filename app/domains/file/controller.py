"""File record API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_principal, get_db, get_storage
from app.core.security import Principal
from app.domains.file.service import FileService
from app.schemas.base import ERROR_RESPONSES, ResponseSchema
from app.schemas.file import FileListResponse, FileRecordResponse, RenameRequest
from app.shared.upload_policy import read_upload
from app.storage import ObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"], responses=ERROR_RESPONSES)


@router.post("/upload", response_model=ResponseSchema, status_code=201)
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
    category: str | None = Form(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Upload a file into the public catalog."""
    upload = await read_upload(file, form=await request.form())

    service = FileService(db, storage)
    record = await service.upload_file(principal, upload, category=category)

    return ResponseSchema(
        status="success",
        message="File uploaded successfully",
        data=FileRecordResponse.model_validate(record).model_dump(mode="json"),
    )


@router.get("/my-files", response_model=FileListResponse)
async def get_my_files(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Files uploaded by the current principal."""
    service = FileService(db, storage)
    records = await service.list_files_by_owner(principal)

    files = [FileRecordResponse.model_validate(record) for record in records]
    return FileListResponse(files=files, total=len(files))


@router.get("/public", response_model=FileListResponse)
async def get_public_files(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """The public catalog. No authentication required."""
    service = FileService(db, storage)
    records = await service.list_public_files()

    files = [FileRecordResponse.model_validate(record) for record in records]
    return FileListResponse(files=files, total=len(files))


@router.get("/download/{file_id}", status_code=307)
async def download_file(
    file_id: UUID = Path(..., description="File ID"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Redirect to the object URL of a published file."""
    service = FileService(db, storage)
    target = await service.get_download_target(file_id)
    return RedirectResponse(url=target, status_code=307)


@router.delete("/{file_id}", response_model=ResponseSchema)
async def delete_file(
    file_id: UUID = Path(..., description="File ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Delete a file record and its blob. Owner only."""
    service = FileService(db, storage)
    await service.delete_file(principal, file_id)

    return ResponseSchema(status="success", message="File deleted successfully", data=None)


@router.put("/{file_id}/rename", response_model=ResponseSchema)
async def rename_file(
    payload: RenameRequest,
    file_id: UUID = Path(..., description="File ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Change the display name of a file. Owner only."""
    service = FileService(db, storage)
    record = await service.rename_file(principal, file_id, payload.new_name)

    return ResponseSchema(
        status="success",
        message="File renamed successfully",
        data=FileRecordResponse.model_validate(record).model_dump(mode="json"),
    )
