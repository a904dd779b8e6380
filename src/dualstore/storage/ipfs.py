"""IPFS content-addressed store backend (Kubo HTTP RPC API)."""

import logging
from pathlib import Path
from typing import AsyncIterator
from uuid import uuid4

import aiofiles
import httpx

from dualstore.storage.base import ContentStore
from dualstore.upload.exceptions import ContentStoreError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536  # 64KB chunks


async def _multipart_file_body(local_path: Path, boundary: str) -> AsyncIterator[bytes]:
    """Yield a one-file multipart/form-data body, reading the file asynchronously."""
    yield (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{local_path.name}"\r\n'
        f"Content-Type: application/octet-stream\r\n"
        f"\r\n"
    ).encode("utf-8")
    async with aiofiles.open(local_path, "rb") as f:
        while chunk := await f.read(CHUNK_SIZE):
            yield chunk
    yield f"\r\n--{boundary}--\r\n".encode("utf-8")


class IpfsContentStore(ContentStore):
    """Adds files through ``/api/v0/add`` and returns their CID."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 300,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def put(self, local_path: Path) -> str:
        """Add ``local_path`` to IPFS (pinned) and return its hash.

        Raises:
            ContentStoreError: On HTTP errors, timeouts or an unusable response
        """
        logger.info(
            "Uploading file to IPFS",
            extra={"ipfs_api_url": self.api_url, "temp_path": str(local_path)},
        )
        try:
            boundary = uuid4().hex
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/api/v0/add",
                    params={"pin": "true"},
                    headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
                    content=_multipart_file_body(local_path, boundary),
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            logger.error("IPFS upload timed out", extra={"timeout": self.timeout})
            raise ContentStoreError(f"IPFS operation timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "IPFS rejected upload",
                extra={"status_code": e.response.status_code, "error": str(e)},
            )
            raise ContentStoreError(
                f"IPFS operation failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("IPFS upload failed", extra={"error": str(e)})
            raise ContentStoreError(f"IPFS operation failed: {e}") from e
        except ValueError as e:
            raise ContentStoreError(f"IPFS returned invalid JSON: {e}") from e
        except OSError as e:
            logger.error("Failed to read file for IPFS upload", extra={"error": str(e)})
            raise ContentStoreError(f"Failed to read file for IPFS upload: {e}") from e

        ipfs_hash = payload.get("Hash") if isinstance(payload, dict) else None
        if not ipfs_hash:
            raise ContentStoreError("No hash in IPFS response")

        logger.info("File uploaded to IPFS", extra={"ipfs_hash": ipfs_hash})
        return ipfs_hash

    def get_backend_name(self) -> str:
        return "ipfs"
