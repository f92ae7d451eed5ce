# ruff: noqa: D107
"""Base exception classes."""

from typing import Any

from fastapi import HTTPException

from app.core.config import settings


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": details},
            headers=headers,
        )


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
        error_code: str = "NOT_FOUND",
    ):
        super().__init__(message=message, status_code=404, error_code=error_code, details=details)


class AppPermissionError(BaseAppException):
    """Exception raised when the principal doesn't own the resource."""

    def __init__(
        self,
        message: str = "Permission denied",
        details: dict[str, Any] | None = None,
        error_code: str = "PERMISSION_DENIED",
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details,
        )


class InvalidInputError(BaseAppException):
    """Exception raised when request input is malformed or out of bounds."""

    def __init__(
        self,
        message: str = "Invalid input",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_INPUT",
            details=details,
        )


class UnauthenticatedError(BaseAppException):
    """Exception raised when a session token is missing or invalid."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHENTICATED",
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class UpstreamFailureError(BaseAppException):
    """Exception raised when the record store or object store fails."""

    def __init__(
        self,
        message: str = "Storage service error",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        # Underlying error text never leaves the service in production.
        if cause is not None and not settings.is_production:
            details = {**(details or {}), "error": str(cause)}
        super().__init__(
            message=message,
            status_code=500,
            error_code="UPSTREAM_FAILURE",
            details=details,
        )


class ConfigurationError(BaseAppException):
    """Exception raised when a required server setting is missing."""

    def __init__(self, message: str = "Server configuration error"):
        super().__init__(message=message, status_code=500, error_code="CONFIGURATION_ERROR")
