"""Guaranteed removal of transient upload files."""

import logging
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


def remove_transient_file(path: Path) -> bool:
    """Best-effort removal of ``path``.

    Returns True if the file was removed by this call. Failures are logged,
    never raised.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("Temporary file already gone", extra={"temp_path": str(path)})
        return False
    except OSError as e:
        logger.warning(
            "Failed to clean up temporary file",
            extra={"temp_path": str(path), "error": str(e)},
        )
        return False

    logger.debug("Temporary file cleaned up", extra={"temp_path": str(path)})
    return True


class TransientFile:
    """Async context manager that owns a transient file path.

    The file is removed when the block exits, whatever the exit path, and
    only once even if ``release`` is called again.
    """

    def __init__(self, path: Path):
        self.path = path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Remove the file now; later calls do nothing."""
        if self._released:
            return
        self._released = True
        remove_transient_file(self.path)

    async def __aenter__(self) -> Path:
        return self.path

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # Synchronous unlink so removal completes even while being cancelled
        self.release()
