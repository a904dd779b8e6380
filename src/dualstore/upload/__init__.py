"""
Upload pipeline

Extracts the file field from a streamed multipart body, writes it to a
size-capped transient file, replicates it to the object store and the
content-addressed store at the same time, and removes the transient file
on every exit path.
"""

from dualstore.upload.exceptions import (
    ContentStoreError,
    IoError,
    MultipartError,
    NoFileError,
    ObjectStoreError,
    SizeLimitExceeded,
    UploadError,
    UploadServiceError,
)
from dualstore.upload.orchestrator import UploadOrchestrator, UploadState

__all__ = [
    "UploadOrchestrator",
    "UploadState",
    "UploadServiceError",
    "NoFileError",
    "SizeLimitExceeded",
    "IoError",
    "MultipartError",
    "ObjectStoreError",
    "ContentStoreError",
    "UploadError",
]
