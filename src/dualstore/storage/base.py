"""Abstract storage backend interfaces."""

from abc import ABC, abstractmethod
from pathlib import Path


class ObjectStore(ABC):
    """Bucket/key addressed store where the caller chooses the key."""

    @abstractmethod
    async def put(self, local_path: Path, bucket: str, key: str) -> str:
        """Upload a local file to ``bucket`` under ``key``.

        Args:
            local_path: File to upload; read, never modified
            bucket: Target bucket name
            key: Target object key

        Returns:
            Locator (URL) of the stored object

        Raises:
            ObjectStoreError: If the upload fails
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass


class ContentStore(ABC):
    """Store whose identifiers are derived from the content itself."""

    @abstractmethod
    async def put(self, local_path: Path) -> str:
        """Upload a local file and return its content address.

        Identical bytes always map to the identical address.

        Raises:
            ContentStoreError: If the upload fails
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
