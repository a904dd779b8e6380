"""Concurrent replication of a transient file to both storage backends."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from dualstore.storage.base import ContentStore, ObjectStore
from dualstore.upload.exceptions import (
    BackendError,
    ContentStoreError,
    ObjectStoreError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplicationOutcome:
    """Locators returned once both backends hold the file."""

    object_store_locator: str
    content_address: str


class ReplicationCoordinator:
    """Runs the object-store and content-store uploads side by side.

    Both uploads are started as separate tasks. The coordinator always waits
    for both to finish; if either failed, the first failure to complete is
    raised. Nothing is rolled back or retried, so a store that succeeded keeps
    its copy and the partial result is logged.
    """

    def __init__(self, object_store: ObjectStore, content_store: ContentStore):
        self.object_store = object_store
        self.content_store = content_store

    async def replicate(self, local_path: Path, bucket: str, key: str) -> ReplicationOutcome:
        """Upload ``local_path`` to both backends concurrently.

        Raises:
            ObjectStoreError: If the object store failed first
            ContentStoreError: If the content store failed first
        """
        object_task = asyncio.create_task(
            self._put_object(local_path, bucket, key), name="replicate-object-store"
        )
        content_task = asyncio.create_task(
            self._put_content(local_path), name="replicate-content-store"
        )
        tasks = [object_task, content_task]

        first_error: BackendError | None = None
        try:
            for finished in asyncio.as_completed(tasks):
                try:
                    await finished
                except BackendError as e:
                    if first_error is None:
                        first_error = e
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if first_error is not None:
            self._log_failure(object_task, content_task, bucket, key)
            raise first_error

        return ReplicationOutcome(
            object_store_locator=object_task.result(),
            content_address=content_task.result(),
        )

    async def _put_object(self, local_path: Path, bucket: str, key: str) -> str:
        try:
            locator = await self.object_store.put(local_path, bucket, key)
        except ObjectStoreError:
            raise
        except Exception as e:
            raise ObjectStoreError(
                f"{self.object_store.get_backend_name()} upload failed: {e}"
            ) from e

        if not locator:
            raise ObjectStoreError(f"{self.object_store.get_backend_name()} returned an empty locator")
        return locator

    async def _put_content(self, local_path: Path) -> str:
        try:
            address = await self.content_store.put(local_path)
        except ContentStoreError:
            raise
        except Exception as e:
            raise ContentStoreError(
                f"{self.content_store.get_backend_name()} upload failed: {e}"
            ) from e

        if not address:
            raise ContentStoreError(f"{self.content_store.get_backend_name()} returned an empty address")
        return address

    @staticmethod
    def _log_failure(
        object_task: "asyncio.Task[str]", content_task: "asyncio.Task[str]", bucket: str, key: str
    ) -> None:
        object_error = object_task.exception()
        content_error = content_task.exception()

        if object_error is None or content_error is None:
            # One side already holds the file; it stays there.
            logger.warning(
                "Partial replication: one backend stored the file, the other failed",
                extra={
                    "bucket": bucket,
                    "key": key,
                    "object_store_locator": None if object_error else object_task.result(),
                    "content_address": None if content_error else content_task.result(),
                    "object_store_error": str(object_error) if object_error else None,
                    "content_store_error": str(content_error) if content_error else None,
                },
            )
        else:
            logger.error(
                "Replication failed on both backends",
                extra={
                    "bucket": bucket,
                    "key": key,
                    "object_store_error": str(object_error),
                    "content_store_error": str(content_error),
                },
            )
