"""
Blob storage abstraction for S3-compatible object stores and in-memory testing.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

import boto3
from botocore.config import Config


class BlobStore(Protocol):
    """Defines the operations the API needs from object storage."""

    async def delete(self, object_key: str) -> None:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for storage interactions."""

    stored_objects: dict[str, bytes] = field(default_factory=dict)

    async def delete(self, object_key: str) -> None:
        # Mirrors S3: deleting a missing object is not an error.
        self.stored_objects.pop(object_key, None)

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class S3BlobStore:
    """
    S3-compatible storage client (AWS, Cloudflare R2, MinIO, Tencent COS).

    boto3 is blocking, so every call is pushed onto a worker thread to keep
    the event loop free.
    """

    bucket: str
    endpoint: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    addressing_style: str = "auto"

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": self.addressing_style},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    async def delete(self, object_key: str) -> None:
        await asyncio.to_thread(
            self._client.delete_object, Bucket=self.bucket, Key=object_key
        )
