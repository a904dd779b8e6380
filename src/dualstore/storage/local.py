"""Local filesystem storage backends for development and tests."""

import asyncio
import hashlib
import os
import shutil
from pathlib import Path
from uuid import uuid4

from dualstore.storage.base import ContentStore, ObjectStore
from dualstore.upload.exceptions import ContentStoreError, ObjectStoreError


class LocalObjectStore(ObjectStore):
    """Copies objects into ``{base_path}/{bucket}/{key}``."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)

    def get_target_path(self, bucket: str, key: str) -> Path:
        """Resolve the on-disk path for ``bucket``/``key``."""
        target = (self.base_path / bucket / key).resolve()
        if not target.is_relative_to(self.base_path.resolve()):
            raise ObjectStoreError(f"Key escapes storage root: {key}")
        return target

    async def put(self, local_path: Path, bucket: str, key: str) -> str:
        target = self.get_target_path(bucket, key)
        try:
            await asyncio.to_thread(self._copy, local_path, target)
        except OSError as e:
            raise ObjectStoreError(f"Local object write failed: {e}") from e
        return target.as_uri()

    @staticmethod
    def _copy(source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)

    def get_backend_name(self) -> str:
        return "local"


class LocalContentStore(ContentStore):
    """Stores blobs under their SHA-256 digest."""

    CHUNK_SIZE = 65536  # 64KB chunks

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)

    async def put(self, local_path: Path) -> str:
        try:
            return await asyncio.to_thread(self._store, local_path)
        except OSError as e:
            raise ContentStoreError(f"Local blob write failed: {e}") from e

    def _store(self, local_path: Path) -> str:
        digest = hashlib.sha256()
        with open(local_path, "rb") as f:
            while chunk := f.read(self.CHUNK_SIZE):
                digest.update(chunk)
        address = digest.hexdigest()

        target = self.base_path / address
        if not target.exists():
            self.base_path.mkdir(parents=True, exist_ok=True)
            # Publish under the final name only once the copy is complete
            partial = self.base_path / f".{address}.{uuid4().hex}.tmp"
            try:
                shutil.copyfile(local_path, partial)
                os.replace(partial, target)
            finally:
                partial.unlink(missing_ok=True)
        return address

    def get_backend_name(self) -> str:
        return "local-cas"
