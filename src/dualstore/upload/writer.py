"""Size-capped streaming writes to transient storage."""

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterable

import aiofiles

from dualstore.upload.cleanup import remove_transient_file
from dualstore.upload.exceptions import IoError, SizeLimitExceeded

logger = logging.getLogger(__name__)


class BoundedStreamWriter:
    """Writes a chunk stream to disk, refusing to grow past ``max_size`` bytes.

    Chunks are appended in arrival order and never accumulated in memory.
    If the stream would exceed the cap the partial file is deleted before
    ``SizeLimitExceeded`` is raised.
    """

    def __init__(self, max_size: int):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size

    async def write(self, chunks: AsyncIterable[bytes], destination: Path) -> int:
        """Stream ``chunks`` into ``destination`` and return the byte count.

        Args:
            chunks: Async iterable of byte chunks
            destination: Path of the file to create; must not exist yet

        Returns:
            Number of bytes written, flushed and synced to disk

        Raises:
            SizeLimitExceeded: If the stream is larger than ``max_size``
            IoError: If the local filesystem fails
        """
        total = 0
        try:
            async with aiofiles.open(destination, "xb") as f:
                async for chunk in chunks:
                    if total + len(chunk) > self.max_size:
                        raise SizeLimitExceeded(self.max_size)
                    await f.write(chunk)
                    total += len(chunk)

                await f.flush()
                await asyncio.to_thread(os.fsync, f.fileno())
        except SizeLimitExceeded:
            logger.warning(
                "Upload exceeded size limit, discarding partial file",
                extra={
                    "temp_path": str(destination),
                    "max_size": self.max_size,
                    "bytes_written": total,
                },
            )
            remove_transient_file(destination)
            raise
        except OSError as e:
            logger.error(
                "Failed to write transient file",
                extra={"temp_path": str(destination), "error": str(e)},
            )
            raise IoError(f"Failed to write transient file: {e}") from e

        logger.debug(
            "Transient file written",
            extra={"temp_path": str(destination), "size_bytes": total},
        )
        return total
