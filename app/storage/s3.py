"""S3-compatible object store (AWS S3, Cloudflare R2, MinIO) using boto3."""

import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from app.storage.base import ObjectStore, StorageError

logger = logging.getLogger(__name__)


class S3ObjectStore(ObjectStore):
    """Object store backed by a single S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        signed_url_expiration: int = 900,
        client=None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.signed_url_expiration = signed_url_expiration
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )

    async def put(self, key: str, data: bytes, content_type: str, original_name: str | None = None) -> None:
        params = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if original_name:
            # Object metadata must be ASCII
            params["Metadata"] = {"original-name": quote(original_name)}
        try:
            await run_in_threadpool(lambda: self._client.put_object(**params))
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 put_object error for %s: %s", key, e)
            raise StorageError(f"Failed to upload object: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        try:
            await run_in_threadpool(
                lambda: self._client.delete_object(Bucket=self.bucket_name, Key=key)
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 delete_object error for %s: %s", key, e)
            raise StorageError(f"Failed to delete object: {e}", key=key) from e

    async def exists(self, key: str) -> bool:
        try:
            await run_in_threadpool(
                lambda: self._client.head_object(Bucket=self.bucket_name, Key=key)
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"Failed to check object: {e}", key=key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check object: {e}", key=key) from e

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def download_url(self, key: str, filename: str | None = None) -> str:
        params = {"Bucket": self.bucket_name, "Key": key}
        if filename:
            safe_name = filename.replace('"', "")
            params["ResponseContentDisposition"] = f'attachment; filename="{safe_name}"'
        try:
            return await run_in_threadpool(
                lambda: self._client.generate_presigned_url(
                    ClientMethod="get_object",
                    Params=params,
                    ExpiresIn=self.signed_url_expiration,
                )
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 generate_presigned_url error for %s: %s", key, e)
            raise StorageError(f"Failed to sign download URL: {e}", key=key) from e
