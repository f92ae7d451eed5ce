"""Authentication API controller."""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.dependencies import auth, get_current_principal
from app.core.rate_limit import AUTH_RATE_LIMIT, limiter
from app.core.security import Principal
from app.schemas.auth import AdminLoginRequest, LoginResponse, PrincipalResponse
from app.schemas.base import ERROR_RESPONSES, ResponseSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"], responses=ERROR_RESPONSES)


@router.post("/admin-login", response_model=LoginResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def admin_login(request: Request, credentials: AdminLoginRequest):
    """Exchange the admin key for a session token."""
    # Key hashing is CPU bound; keep it off the event loop.
    session = await run_in_threadpool(auth.verify_admin_key, credentials.admin_key)
    logger.info("Admin login from %s", request.client.host if request.client else "unknown")

    return LoginResponse(
        token=session.access_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
        expires_at=session.expires_at,
        principal=PrincipalResponse.model_validate(session.principal.model_dump()),
    )


@router.get("/me", response_model=ResponseSchema)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """Return the principal behind the current token."""
    return ResponseSchema(
        status="success",
        message="Principal retrieved successfully",
        data=PrincipalResponse.model_validate(principal.model_dump()).model_dump(),
    )


@router.get("/health")
async def auth_health():
    return {
        "status": "healthy",
        "service": "auth",
        "admin_login_enabled": settings.has_admin_credentials,
    }
