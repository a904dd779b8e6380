"""Storage backend selection."""

from functools import lru_cache
from pathlib import Path

from dualstore.core.config import settings
from dualstore.storage.base import ContentStore, ObjectStore
from dualstore.storage.ipfs import IpfsContentStore
from dualstore.storage.local import LocalContentStore, LocalObjectStore
from dualstore.storage.s3 import S3ObjectStore


@lru_cache
def get_object_store() -> ObjectStore:
    """Return the object store configured by ``STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "remote":
        return S3ObjectStore(
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
    if settings.STORAGE_BACKEND == "local":
        return LocalObjectStore(Path(settings.LOCAL_STORAGE_PATH) / "objects")
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")


@lru_cache
def get_content_store() -> ContentStore:
    """Return the content-addressed store configured by ``STORAGE_BACKEND``."""
    if settings.STORAGE_BACKEND == "remote":
        return IpfsContentStore(api_url=settings.IPFS_API_URL, timeout=settings.IPFS_TIMEOUT)
    if settings.STORAGE_BACKEND == "local":
        return LocalContentStore(Path(settings.LOCAL_STORAGE_PATH) / "blobs")
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")
