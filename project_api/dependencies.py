"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends

from project_api.config import get_settings
from project_api.kv import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from project_api.service import ProjectService
from project_api.storage import BlobStore, InMemoryBlobStore, S3BlobStore

_kv_store: KeyValueStore | None = None
_blob_store: BlobStore | None = None


def get_kv_store() -> KeyValueStore:
    """
    Return a singleton key-value store so in-memory state persists across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.redis_url:
        _kv_store = InMemoryKeyValueStore()
    else:
        _kv_store = RedisKeyValueStore(
            url=settings.redis_url,
            namespace=settings.redis_key_namespace,
        )
    return _kv_store


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store:
        return _blob_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.s3_bucket:
        _blob_store = InMemoryBlobStore()
    else:
        _blob_store = S3BlobStore(
            bucket=settings.s3_bucket,
            endpoint=settings.s3_endpoint,
            region=settings.s3_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return _blob_store


def get_project_service(
    kv: KeyValueStore = Depends(get_kv_store),
    blobs: BlobStore = Depends(get_blob_store),
) -> ProjectService:
    settings = get_settings()
    return ProjectService(
        kv,
        blobs,
        cascade_delete=settings.cascade_delete,
        link_lyrics_to_project=settings.link_lyrics_to_project,
    )


async def close_stores() -> None:
    """Release store connections and drop the singletons."""
    global _kv_store, _blob_store
    if isinstance(_kv_store, RedisKeyValueStore):
        await _kv_store.close()
    _kv_store = None
    _blob_store = None
