# app/core/dependencies.py
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import AdminAuthenticator, Principal
from app.database import get_db
from app.exceptions.base import BaseAppException, UnauthenticatedError
from app.storage import ObjectStore, get_object_store

logger = logging.getLogger(__name__)

# auto_error is off so a missing header yields our 401 body instead of FastAPI's default.
security = HTTPBearer(auto_error=False)
auth = AdminAuthenticator()

__all__ = [
    "auth",
    "get_current_principal",
    "get_db",
    "get_storage",
    "security",
    "validate_token",
]


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    """Validate and decode the session token from the Authorization header.

    Returns:
        Principal: Identity asserted by the token

    Raises:
        UnauthenticatedError: If the token is missing, malformed, expired or forged
    """
    if not token or not token.credentials:
        raise UnauthenticatedError("Authentication token is required")

    try:
        return auth.verify_token(token.credentials)
    except BaseAppException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", str(e))
        raise UnauthenticatedError("Authentication failed") from e


async def get_current_principal(
    request: Request,
    principal: Principal = Depends(validate_token),
) -> Principal:
    """Attach the authenticated principal to the request for downstream checks.

    Returns:
        Principal: Current authenticated principal
    """
    request.state.principal_id = principal.id
    return principal


def get_storage() -> ObjectStore:
    """Object store used by the request handlers."""
    return get_object_store()
