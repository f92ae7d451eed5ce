"""Upload validation shared by admin uploads and student submissions.

Both entry points accept exactly the same files: the MIME allow-list, the
extension allow-list, the filename safety rules and the size ceiling all live
here so they cannot drift apart.
"""

import os
import secrets
import time

from fastapi import UploadFile
from pydantic import BaseModel
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.core.config import settings
from app.exceptions.base import InvalidInputError
from app.exceptions.file import InvalidUploadError

# MIME type -> extensions accepted for it
ALLOWED_MIME_TYPES: dict[str, tuple[str, ...]] = {
    "application/pdf": (".pdf",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (".docx",),
    "application/vnd.ms-excel": (".xls",),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (".xlsx",),
    "application/vnd.ms-powerpoint": (".ppt",),
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": (".pptx",),
    "text/plain": (".txt",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
}

ALLOWED_EXTENSIONS: frozenset[str] = frozenset(
    ext for extensions in ALLOWED_MIME_TYPES.values() for ext in extensions
)

UPLOADS_NAMESPACE = "uploads"
SUBMISSIONS_NAMESPACE = "submissions"


class ValidatedUpload(BaseModel):
    """An uploaded file that passed the policy checks."""

    filename: str
    content_type: str
    extension: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def sanitize_text(value, max_length: int) -> str:
    """Trim whitespace and cut to ``max_length``; non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


def normalize_content_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def validate_filename(filename: str | None) -> str:
    """Reject empty, overlong and path-like file names."""
    if filename is None or not filename.strip():
        raise InvalidUploadError("File name is required")
    if len(filename) > settings.max_filename_length:
        raise InvalidUploadError(
            f"File name cannot exceed {settings.max_filename_length} characters"
        )
    if ".." in filename or "/" in filename or "\\" in filename:
        raise InvalidUploadError("File name contains invalid path characters")
    return filename.strip()


def validate_upload(
    filename: str | None,
    content_type: str | None,
    data: bytes,
    max_size: int | None = None,
) -> ValidatedUpload:
    """Apply the full policy to an in-memory upload."""
    max_size = settings.max_file_size if max_size is None else max_size
    name = validate_filename(filename)

    if not data:
        raise InvalidUploadError("Uploaded file is empty")
    if len(data) > max_size:
        raise InvalidUploadError(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.",
            details={"max_size": max_size},
        )

    mime_type = normalize_content_type(content_type)
    extension = os.path.splitext(name)[1].lower()
    allowed_for_type = ALLOWED_MIME_TYPES.get(mime_type)
    if allowed_for_type is None or extension not in ALLOWED_EXTENSIONS:
        raise InvalidUploadError(
            "Invalid file type. Only documents, PDFs, and images are allowed."
        )
    if extension not in allowed_for_type:
        raise InvalidUploadError("File extension does not match the file type")

    return ValidatedUpload(
        filename=name, content_type=mime_type, extension=extension, data=data
    )


def ensure_single_file(form: FormData) -> None:
    """Reject a multipart body carrying more than one file part under any field."""
    files = [value for _, value in form.multi_items() if isinstance(value, StarletteUploadFile)]
    if len(files) > 1:
        raise InvalidUploadError(
            "Only one file may be uploaded per request",
            details={"file_parts": len(files)},
        )


async def read_upload(
    upload: UploadFile | None,
    max_size: int | None = None,
    form: FormData | None = None,
) -> ValidatedUpload:
    """Read a multipart upload and validate it.

    When the parsed ``form`` is given, requests with extra file parts are
    refused before anything is read. At most ``max_size + 1`` bytes are read
    so an oversized body is detected without buffering all of it.
    """
    if form is not None:
        ensure_single_file(form)
    if upload is None:
        raise InvalidUploadError("No file uploaded")

    max_size = settings.max_file_size if max_size is None else max_size
    data = await upload.read(max_size + 1)
    return validate_upload(upload.filename, upload.content_type, data, max_size=max_size)


def generate_storage_key(namespace: str, extension: str) -> str:
    """Unguessable, collision-resistant key: ``<namespace>/<epoch-ms>-<hex><ext>``."""
    timestamp = int(time.time() * 1000)
    return f"{namespace}/{timestamp}-{secrets.token_hex(8)}{extension.lower()}"


def validate_display_name(name: str | None) -> str:
    """Clean a new display name for a file record or submission."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Name cannot be empty or only whitespace")
    name = name.strip()
    if len(name) > settings.max_filename_length:
        raise InvalidInputError(
            f"Name cannot exceed {settings.max_filename_length} characters"
        )
    if ".." in name or "/" in name or "\\" in name:
        raise InvalidInputError("Name contains invalid path characters")
    return name
