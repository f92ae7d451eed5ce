"""Submission API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Form, Path, Request, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_principal, get_db, get_storage, validate_token
from app.core.security import Principal
from app.domains.submission.service import SubmissionService
from app.exceptions.base import InvalidInputError
from app.schemas.base import ERROR_RESPONSES, ResponseSchema
from app.schemas.file import FileRecordResponse, RenameRequest
from app.schemas.submission import (
    RejectRequest,
    SubmissionCreate,
    SubmissionListResponse,
    SubmissionResponse,
)
from app.shared.upload_policy import read_upload
from app.storage import ObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["submissions"], responses=ERROR_RESPONSES)


def _parse_metadata(**fields) -> SubmissionCreate:
    try:
        return SubmissionCreate.model_validate(fields)
    except ValidationError as e:
        errors = [
            {"loc": list(err.get("loc", [])), "msg": str(err.get("msg", "Invalid value"))}
            for err in e.errors()
        ]
        first_field = errors[0]["loc"][0] if errors and errors[0]["loc"] else "input"
        raise InvalidInputError(f"Invalid {first_field}", details={"errors": errors}) from e


@router.post("/submit", response_model=ResponseSchema, status_code=201)
async def submit_file(
    request: Request,
    file: UploadFile | None = File(None),
    student_name: str | None = Form(None, alias="studentName"),
    student_email: str | None = Form(None, alias="studentEmail"),
    description: str | None = Form(None),
    category: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Accept a student submission. No authentication required."""
    metadata = _parse_metadata(
        student_name=student_name,
        student_email=student_email,
        description=description,
        category=category,
    )
    upload = await read_upload(file, form=await request.form())

    service = SubmissionService(db, storage)
    submission = await service.submit(metadata, upload)

    return ResponseSchema(
        status="success",
        message="File submitted successfully. Waiting for admin approval.",
        data=SubmissionResponse.model_validate(submission).model_dump(mode="json"),
    )


@router.get(
    "/pending",
    response_model=SubmissionListResponse,
    dependencies=[Depends(validate_token)],
)
async def get_pending_submissions(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Submissions waiting for review, newest first."""
    service = SubmissionService(db, storage)
    submissions = await service.list_pending()

    items = [SubmissionResponse.model_validate(s) for s in submissions]
    return SubmissionListResponse(submissions=items, total=len(items))


@router.get(
    "/all",
    response_model=SubmissionListResponse,
    dependencies=[Depends(validate_token)],
)
async def get_all_submissions(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    service = SubmissionService(db, storage)
    submissions = await service.list_all()

    items = [SubmissionResponse.model_validate(s) for s in submissions]
    return SubmissionListResponse(submissions=items, total=len(items))


@router.get(
    "/download/{submission_id}",
    status_code=307,
    dependencies=[Depends(validate_token)],
)
async def download_submission(
    submission_id: UUID = Path(..., description="Submission ID"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Redirect to the object URL of a submitted file."""
    service = SubmissionService(db, storage)
    target = await service.get_download_target(submission_id)
    return RedirectResponse(url=target, status_code=307)


@router.post("/approve/{submission_id}", response_model=ResponseSchema)
async def approve_submission(
    submission_id: UUID = Path(..., description="Submission ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Publish a pending submission to the public catalog."""
    service = SubmissionService(db, storage)
    record = await service.approve(principal, submission_id)

    return ResponseSchema(
        status="success",
        message="Submission approved and published",
        data=FileRecordResponse.model_validate(record).model_dump(mode="json"),
    )


@router.post(
    "/reject/{submission_id}",
    response_model=ResponseSchema,
    dependencies=[Depends(validate_token)],
)
async def reject_submission(
    submission_id: UUID = Path(..., description="Submission ID"),
    payload: RejectRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    """Reject a pending submission and discard its file."""
    service = SubmissionService(db, storage)
    submission = await service.reject(submission_id, payload.reason if payload else None)

    return ResponseSchema(
        status="success",
        message="Submission rejected",
        data=SubmissionResponse.model_validate(submission).model_dump(mode="json"),
    )


@router.put(
    "/{submission_id}/rename",
    response_model=ResponseSchema,
    dependencies=[Depends(validate_token)],
)
async def rename_submission(
    payload: RenameRequest,
    submission_id: UUID = Path(..., description="Submission ID"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStore = Depends(get_storage),
):
    service = SubmissionService(db, storage)
    submission = await service.rename(submission_id, payload.new_name)

    return ResponseSchema(
        status="success",
        message="Submission renamed successfully",
        data=SubmissionResponse.model_validate(submission).model_dump(mode="json"),
    )
