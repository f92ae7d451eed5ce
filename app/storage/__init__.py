"""Object store backends and the configured-store factory."""

from functools import lru_cache

from app.core.config import StorageBackendEnum, settings
from app.storage.base import ObjectStore, StorageError
from app.storage.local import LocalObjectStore
from app.storage.s3 import S3ObjectStore


@lru_cache
def get_object_store() -> ObjectStore:
    """Build the object store selected by STORAGE_BACKEND (one per process)."""
    if settings.storage_backend == StorageBackendEnum.s3:
        return S3ObjectStore(
            bucket_name=settings.s3_bucket_name,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            public_base_url=settings.s3_public_base_url,
            signed_url_expiration=settings.download_url_expire_seconds,
        )
    return LocalObjectStore(
        root=settings.local_storage_path,
        url_prefix=settings.local_storage_url_prefix,
        signing_key=settings.secret_key,
        signed_url_expiration=settings.download_url_expire_seconds,
        algorithm=settings.algorithm,
    )


__all__ = [
    "ObjectStore",
    "StorageError",
    "LocalObjectStore",
    "S3ObjectStore",
    "get_object_store",
]
