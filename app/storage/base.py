"""Object store abstraction for uploaded file bytes."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when an object store operation fails."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class ObjectStore(ABC):
    """Durable blob storage addressed by generated keys.

    Implementations must be safe to share between concurrent requests.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str, original_name: str | None = None) -> None:
        """Store ``data`` under ``key``, replacing nothing (keys are unique)."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing object is not an error."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return True if an object is stored under ``key``."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Stable URL derived from the key."""

    @abstractmethod
    async def download_url(self, key: str, filename: str | None = None) -> str:
        """URL a client can be redirected to in order to fetch the object."""

    async def discard(self, key: str) -> bool:
        """Best-effort delete used to compensate a failed record write."""
        try:
            await self.delete(key)
            return True
        except StorageError as e:
            logger.error("Could not remove orphaned object %s: %s", key, e)
            return False
