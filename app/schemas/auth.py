"""Authentication request/response schemas."""

from datetime import datetime

from pydantic import Field

from .base import BaseSchema


class AdminLoginRequest(BaseSchema):
    """Schema for the admin login request."""

    admin_key: str = Field(..., alias="adminKey", max_length=512, description="Admin access key")


class PrincipalResponse(BaseSchema):
    """Schema for the authenticated principal."""

    id: str
    name: str
    role: str


class LoginResponse(BaseSchema):
    """Schema for a successful admin login."""

    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    principal: PrincipalResponse
