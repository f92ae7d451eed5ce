"""
Unit tests for Dependencies module.

This module tests the token validation and principal dependencies used by
the protected routes.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.dependencies import auth, get_current_principal, get_storage, validate_token
from app.exceptions.auth import TokenExpiredError
from app.storage import get_object_store


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestValidateToken:
    """Test cases for validate_token dependency."""

    @pytest.mark.asyncio
    async def test_validate_token_success(self):
        token = auth.issue_token().access_token

        principal = await validate_token(_credentials(token))

        assert principal == auth.admin_principal

    @pytest.mark.asyncio
    async def test_validate_token_none_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await validate_token(None)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail["message"] == "Authentication token is required"

    @pytest.mark.asyncio
    async def test_validate_token_empty_credentials(self):
        mock_token = MagicMock()
        mock_token.credentials = ""

        with pytest.raises(HTTPException) as exc_info:
            await validate_token(mock_token)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_app_exceptions_pass_through(self):
        with patch("app.core.dependencies.auth.verify_token", side_effect=TokenExpiredError()):
            with pytest.raises(TokenExpiredError):
                await validate_token(_credentials("expired"))

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_401(self):
        with patch("app.core.dependencies.auth.verify_token", side_effect=KeyError("sub")):
            with pytest.raises(HTTPException) as exc_info:
                await validate_token(_credentials("odd"))

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail["message"] == "Authentication failed"


@pytest.mark.asyncio
async def test_get_current_principal_records_id_on_request():
    request = MagicMock()
    principal = auth.admin_principal

    result = await get_current_principal(request, principal)

    assert result is principal
    assert request.state.principal_id == principal.id


def test_get_storage_returns_configured_store():
    assert get_storage() is get_object_store()
