"""Pytest configuration and shared fixtures."""

import asyncio
import hashlib
from pathlib import Path

import pytest

from dualstore.core.config import UploadConfig
from dualstore.storage.base import ContentStore, ObjectStore

BOUNDARY = "dualstore-test-boundary"
MULTIPART_CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def build_multipart(parts, boundary: str = BOUNDARY, close: bool = True) -> bytes:
    """Encode ``(field_name, filename, content)`` tuples as multipart/form-data.

    ``filename`` may be None for a plain form field.
    """
    body = b""
    for name, filename, content in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        body += (
            f"--{boundary}\r\n"
            f"Content-Disposition: {disposition}\r\n"
            f"Content-Type: application/octet-stream\r\n"
            f"\r\n"
        ).encode("utf-8")
        body += content + b"\r\n"
    if close:
        body += f"--{boundary}--\r\n".encode("utf-8")
    return body


async def stream_bytes(data: bytes, chunk_size: int = 7):
    """Yield ``data`` in small chunks, like a network transport would."""
    for start in range(0, len(data), chunk_size):
        await asyncio.sleep(0)
        yield data[start:start + chunk_size]


class FakeObjectStore(ObjectStore):
    """In-memory object store recording every call."""

    def __init__(self, error: Exception | None = None, delay: float = 0):
        self.error = error
        self.delay = delay
        self.calls: list[tuple[Path, str, str]] = []
        self.contents: list[bytes] = []

    async def put(self, local_path: Path, bucket: str, key: str) -> str:
        self.calls.append((local_path, bucket, key))
        self.contents.append(local_path.read_bytes())
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return f"https://{bucket}.s3.amazonaws.com/{key}"

    def get_backend_name(self) -> str:
        return "fake-object"


class FakeContentStore(ContentStore):
    """In-memory content store addressing blobs by SHA-256."""

    def __init__(self, error: Exception | None = None, delay: float = 0):
        self.error = error
        self.delay = delay
        self.calls: list[Path] = []
        self.blobs: dict[str, bytes] = {}

    async def put(self, local_path: Path) -> str:
        self.calls.append(local_path)
        content = local_path.read_bytes()
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        address = hashlib.sha256(content).hexdigest()
        self.blobs[address] = content
        return address

    def get_backend_name(self) -> str:
        return "fake-content"


@pytest.fixture
def multipart():
    """Multipart body builder."""
    return build_multipart


@pytest.fixture
def upload_config(tmp_path):
    """Upload configuration with a 1000 byte cap and a private temp dir."""
    temp_dir = tmp_path / "transient"
    temp_dir.mkdir()
    return UploadConfig(
        max_file_size=1000,
        temp_dir=temp_dir,
        bucket="test-bucket",
        key_prefix="uploads",
    )


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def content_store():
    return FakeContentStore()
