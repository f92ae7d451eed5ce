"""File record exceptions."""

from typing import Any

from .base import AppPermissionError, BaseAppException, NotFoundError


class FileRecordNotFoundError(NotFoundError):
    """Raised when a file record is not found."""

    def __init__(self, message: str = "File not found"):
        super().__init__(message=message, error_code="FILE_NOT_FOUND")


class StoredObjectMissingError(NotFoundError):
    """Raised when a record exists but its blob is gone from the object store."""

    def __init__(self, key: str | None = None):
        super().__init__(
            message="File not found on disk",
            details={"storage_key": key} if key else None,
            error_code="BLOB_NOT_FOUND",
        )


class FilePermissionError(AppPermissionError):
    """Raised when the principal does not own the file record."""

    def __init__(self, message: str = "You don't have permission to modify this file"):
        super().__init__(message=message, error_code="FILE_PERMISSION_DENIED")


class InvalidUploadError(BaseAppException):
    """Raised when an uploaded file violates the upload policy."""

    def __init__(
        self,
        message: str = "Invalid file upload",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message, status_code=400, error_code="INVALID_UPLOAD", details=details
        )
