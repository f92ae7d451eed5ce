"""Admin key verification and session token handling."""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from app.core.config import Settings, settings
from app.exceptions.auth import InvalidCredentialsError, InvalidTokenError, TokenExpiredError
from app.exceptions.base import ConfigurationError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

KEY_CONTEXT = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class Principal(BaseModel):
    """The authenticated actor of a request."""

    id: str
    name: str
    role: str


class SessionToken(BaseModel):
    """A signed session credential and its metadata."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    principal: Principal


def hash_admin_key(admin_key: str) -> str:
    """Hash an admin key for the ADMIN_KEY_HASH setting."""
    return KEY_CONTEXT.hash(admin_key)


class AdminAuthenticator:
    """
    Verifies the admin key and issues/verifies JWT session tokens.

    The service is stateless: tokens carry the principal identity and expiry,
    and there is a single admin principal whose identity comes from settings.

    :ivar config: Settings providing the secret, algorithm, lifetime and key hash.
    :type config: Settings
    """

    def __init__(self, config: Settings | None = None):
        self.config = config or settings

    @property
    def admin_principal(self) -> Principal:
        return Principal(
            id=self.config.admin_principal_id,
            name=self.config.admin_display_name,
            role=ADMIN_ROLE,
        )

    def verify_admin_key(self, candidate_key: str | None) -> SessionToken:
        """
        Check ``candidate_key`` against the stored hash and issue a session token.

        The same error is raised for every kind of mismatch so callers cannot
        tell a malformed key from a wrong one.

        :param candidate_key: The key submitted by the client.
        :return: A freshly signed session token.
        """
        stored_hash = self.config.admin_key_hash
        if not stored_hash:
            logger.error("Admin login attempted but ADMIN_KEY_HASH is not configured")
            raise ConfigurationError()

        if not candidate_key:
            raise InvalidCredentialsError()

        try:
            is_valid = KEY_CONTEXT.verify(candidate_key, stored_hash)
        except (ValueError, TypeError) as e:
            logger.error("Stored admin key hash is unusable: %s", e)
            raise ConfigurationError() from e

        if not is_valid:
            logger.warning("Rejected admin login with invalid key")
            raise InvalidCredentialsError()

        return self.issue_token()

    def issue_token(self) -> SessionToken:
        principal = self.admin_principal
        issued_at = datetime.now(timezone.utc)
        lifetime = timedelta(minutes=self.config.access_token_expire_minutes)
        expires_at = issued_at + lifetime

        payload = {
            "sub": principal.id,
            "name": principal.name,
            "role": principal.role,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

        return SessionToken(
            access_token=token,
            expires_in=int(lifetime.total_seconds()),
            expires_at=expires_at,
            principal=principal,
        )

    def verify_token(self, token: str | None) -> Principal:
        """
        Verify signature and expiry of a session token.

        :param token: The raw bearer token.
        :return: The principal asserted by the token.
        """
        if not token:
            raise InvalidTokenError("Authentication token is required")

        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session token: %s", e)
            raise InvalidTokenError() from e

        if payload.get("role") != ADMIN_ROLE or payload.get("sub") != self.config.admin_principal_id:
            raise InvalidTokenError()

        return Principal(
            id=payload["sub"],
            name=payload.get("name") or self.config.admin_display_name,
            role=payload["role"],
        )
