"""Orchestrator for the upload pipeline."""

import logging
import time
from contextlib import aclosing
from enum import Enum
from typing import AsyncIterable
from uuid import uuid4

from dualstore.core.config import UploadConfig
from dualstore.core.logging import upload_id_context
from dualstore.models.upload import ExtractedFile, UploadResponse
from dualstore.storage.base import ContentStore, ObjectStore
from dualstore.upload.cleanup import TransientFile
from dualstore.upload.extractor import MultipartExtractor
from dualstore.upload.exceptions import UploadError, UploadServiceError
from dualstore.upload.keys import generate_key
from dualstore.upload.replication import ReplicationCoordinator
from dualstore.upload.writer import BoundedStreamWriter

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    """Stages of a single upload."""

    EXTRACTING = "extracting"
    WRITING = "writing"
    KEY_GENERATED = "key_generated"
    REPLICATING = "replicating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS: dict[UploadState, frozenset[UploadState]] = {
    UploadState.EXTRACTING: frozenset({UploadState.WRITING, UploadState.FAILED}),
    UploadState.WRITING: frozenset({UploadState.KEY_GENERATED, UploadState.FAILED}),
    UploadState.KEY_GENERATED: frozenset({UploadState.REPLICATING, UploadState.FAILED}),
    UploadState.REPLICATING: frozenset({UploadState.SUCCEEDED, UploadState.FAILED}),
    UploadState.SUCCEEDED: frozenset(),
    UploadState.FAILED: frozenset(),
}


def advance(current: UploadState, new: UploadState) -> UploadState:
    """Return ``new`` if the pipeline may move there from ``current``."""
    if new not in _TRANSITIONS[current]:
        raise RuntimeError(f"Illegal upload state transition {current.value} -> {new.value}")
    logger.debug("Upload state changed", extra={"from_state": current.value, "to_state": new.value})
    return new


class UploadOrchestrator:
    """Runs one upload end to end: extract, write, key, replicate, clean up.

    The transient file is owned by a ``TransientFile`` guard for its whole
    life, so it is gone by the time ``handle_upload`` returns or raises.
    """

    def __init__(self, config: UploadConfig, object_store: ObjectStore, content_store: ContentStore):
        self.config = config
        self.writer = BoundedStreamWriter(config.max_file_size)
        self.replicator = ReplicationCoordinator(object_store, content_store)

    async def handle_upload(self, content_type: str | None, body: AsyncIterable[bytes]) -> UploadResponse:
        """Process one multipart upload.

        Args:
            content_type: The request's Content-Type header
            body: Async iterable of raw body chunks

        Returns:
            UploadResponse holding both locators

        Raises:
            UploadServiceError: Subclass matching the failure
        """
        upload_id = uuid4().hex
        token = upload_id_context.set(upload_id)
        start_time = time.time()
        state = UploadState.EXTRACTING

        try:
            extractor = MultipartExtractor(
                content_type, body, max_body_size=self.config.max_file_size
            )
            part = await extractor.extract()
            state = advance(state, UploadState.WRITING)

            transient_path = self.config.temp_dir / f"{upload_id}.part"
            async with TransientFile(transient_path) as path:
                async with aclosing(part.chunks) as chunks:
                    byte_count = await self.writer.write(chunks, path)
                extracted = ExtractedFile(
                    transient_path=path,
                    original_filename=part.filename,
                    byte_count=byte_count,
                )

                key = generate_key(extracted.original_filename, self.config.key_prefix)
                state = advance(state, UploadState.KEY_GENERATED)

                state = advance(state, UploadState.REPLICATING)
                outcome = await self.replicator.replicate(path, self.config.bucket, key)

            response = UploadResponse(
                s3_url=outcome.object_store_locator,
                ipfs_hash=outcome.content_address,
                filename=extracted.original_filename,
                size=extracted.byte_count,
            )
            state = advance(state, UploadState.SUCCEEDED)
            logger.info(
                "Upload completed",
                extra={
                    "original_filename": extracted.original_filename,
                    "size_bytes": extracted.byte_count,
                    "key": key,
                    "s3_url": outcome.object_store_locator,
                    "ipfs_hash": outcome.content_address,
                    "duration_ms": (time.time() - start_time) * 1000,
                },
            )
            return response

        except UploadServiceError as e:
            failed_in = state
            state = advance(state, UploadState.FAILED)
            logger.warning(
                "Upload failed",
                extra={"failed_state": failed_in.value, "error_type": type(e).__name__, "error": str(e)},
            )
            raise
        except Exception as e:
            failed_in = state
            state = advance(state, UploadState.FAILED)
            logger.error(
                "Unexpected error during upload",
                extra={"failed_state": failed_in.value, "error": str(e)},
                exc_info=True,
            )
            raise UploadError(f"Upload failed: {e}") from e
        finally:
            upload_id_context.reset(token)
