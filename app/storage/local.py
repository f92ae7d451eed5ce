"""Filesystem-backed object store used for development and single-host deployments."""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import urlencode

import jwt
from starlette.concurrency import run_in_threadpool

from app.storage.base import ObjectStore, StorageError

logger = logging.getLogger(__name__)

DOWNLOAD_TOKEN_PURPOSE = "download"


class LocalObjectStore(ObjectStore):
    """Stores blobs under a root directory that the app serves at ``url_prefix``.

    Download URLs carry a short-lived signed token, the local counterpart of an
    S3 presigned URL, so blobs that are not published can still be fetched
    through a redirect from an authenticated endpoint.
    """

    def __init__(
        self,
        root: str | Path,
        url_prefix: str = "/media",
        *,
        signing_key: str,
        signed_url_expiration: int = 900,
        algorithm: str = "HS256",
    ):
        self.root = Path(root).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.signing_key = signing_key
        self.signed_url_expiration = signed_url_expiration
        self.algorithm = algorithm

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        # Keys are generated server-side, but never let one escape the root.
        try:
            path.relative_to(self.root)
        except ValueError:
            raise StorageError("Storage key escapes storage root", key=key) from None
        return path

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, key: str, data: bytes, content_type: str, original_name: str | None = None) -> None:
        path = self.path_for(key)
        try:
            await run_in_threadpool(self._write, path, data)
        except OSError as e:
            logger.error("Local storage write failed for %s: %s", key, e)
            raise StorageError(f"Failed to write object: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            await run_in_threadpool(lambda: path.unlink(missing_ok=True))
        except OSError as e:
            logger.error("Local storage delete failed for %s: %s", key, e)
            raise StorageError(f"Failed to delete object: {e}", key=key) from e

    async def exists(self, key: str) -> bool:
        path = self.path_for(key)
        return await run_in_threadpool(path.is_file)

    def public_url(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    async def download_url(self, key: str, filename: str | None = None) -> str:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.signed_url_expiration)
        claims = {"sub": key, "purpose": DOWNLOAD_TOKEN_PURPOSE, "exp": expires_at}
        if filename:
            claims["filename"] = filename
        token = jwt.encode(claims, self.signing_key, algorithm=self.algorithm)
        return f"{self.public_url(key)}?{urlencode({'token': token})}"

    def verify_download_token(self, key: str, token: str) -> dict | None:
        """Claims of a valid, unexpired token issued for ``key``, else None."""
        try:
            claims = jwt.decode(
                token,
                self.signing_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.info("Rejected download token for %s: %s", key, e)
            return None
        if claims.get("sub") != key or claims.get("purpose") != DOWNLOAD_TOKEN_PURPOSE:
            return None
        return claims
