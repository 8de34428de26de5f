"""
Blob storage for uploaded verification documents.

The local backend writes under a directory and is meant for development; the
S3 backend hands out presigned download URLs. Both run their blocking I/O in
a worker thread.
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from ...config import Settings
from ...core.exceptions import ExternalServiceError
from ...core.logging import get_logger

logger = get_logger(__name__)


class StorageClient(ABC):
    """Stores document blobs by key."""

    @abstractmethod
    async def save(self, key: str, content: bytes, content_type: str | None) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def download_url(self, key: str, file_name: str) -> str:
        ...


class LocalStorageClient(StorageClient):
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Storage key escapes the storage root: {key}")
        return path

    def _write(self, key: str, content: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def save(self, key: str, content: bytes, content_type: str | None) -> None:
        try:
            await asyncio.to_thread(self._write, key, content)
        except OSError as e:
            raise ExternalServiceError(
                "storage", "save", details={"key": key, "error": str(e)}
            ) from e
        logger.debug(f"Stored {len(content)} bytes at {key}")

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._path(key).unlink, missing_ok=True)
        except OSError as e:
            raise ExternalServiceError(
                "storage", "delete", details={"key": key, "error": str(e)}
            ) from e

    async def download_url(self, key: str, file_name: str) -> str:
        return self._path(key).as_uri()


class S3StorageClient(StorageClient):
    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        url_expiry_seconds: int = 900,
        client=None,
    ):
        self.bucket = bucket
        self.url_expiry_seconds = url_expiry_seconds
        self._s3 = client or boto3.client("s3", region_name=region)

    async def _call(self, operation: str, func, **kwargs):
        try:
            return await asyncio.to_thread(func, **kwargs)
        except (BotoCoreError, ClientError) as e:
            key = kwargs.get("Key")
            logger.error(f"S3 {operation} failed for {key}: {e}")
            raise ExternalServiceError(
                "storage", operation, details={"key": key, "error": str(e)}
            ) from e

    async def save(self, key: str, content: bytes, content_type: str | None) -> None:
        params = {"Bucket": self.bucket, "Key": key, "Body": content}
        if content_type:
            params["ContentType"] = content_type
        await self._call("save", self._s3.put_object, **params)

    async def delete(self, key: str) -> None:
        await self._call("delete", self._s3.delete_object, Bucket=self.bucket, Key=key)

    async def download_url(self, key: str, file_name: str) -> str:
        return await self._call(
            "download_url",
            self._s3.generate_presigned_url,
            ClientMethod="get_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ResponseContentDisposition": f'attachment; filename="{file_name}"',
            },
            ExpiresIn=self.url_expiry_seconds,
        )


def build_storage_client(settings: Settings) -> StorageClient:
    if settings.storage_backend == "s3":
        if not settings.storage_bucket:
            raise ValueError("storage_bucket is required for the s3 storage backend")
        return S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.storage_region,
            url_expiry_seconds=settings.storage_url_expiry_seconds,
        )
    return LocalStorageClient(settings.storage_local_path)


def get_storage_client(request: Request) -> StorageClient:
    """Dependency returning the storage client created at application startup."""
    return request.app.state.storage_client
