"""Authentication exceptions."""

from .base import BaseAppException, UnauthenticatedError


class InvalidCredentialsError(BaseAppException):
    """Raised when an admin key does not match the stored hash."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="INVALID_CREDENTIALS",
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpiredError(UnauthenticatedError):
    """Raised when a session token is past its expiry."""

    def __init__(self, message: str = "Session token has expired"):
        super().__init__(message=message)


class InvalidTokenError(UnauthenticatedError):
    """Raised when a session token is malformed or its signature is invalid."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message=message)
