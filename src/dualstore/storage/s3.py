"""Amazon S3 (or S3-compatible) object store backend."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import boto3
from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from dualstore.storage.base import ObjectStore
from dualstore.upload.exceptions import ObjectStoreError

logger = logging.getLogger(__name__)


class S3ObjectStore(ObjectStore):
    """Uploads files with boto3's managed transfer, off the event loop."""

    def __init__(
        self,
        region: str,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ):
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-load and cache the boto3 client."""
        if self._client is None:
            client_kwargs: dict[str, Any] = {"region_name": self.region}
            if self.endpoint_url:
                client_kwargs["endpoint_url"] = self.endpoint_url
            if self._access_key_id and self._secret_access_key:
                client_kwargs["aws_access_key_id"] = self._access_key_id
                client_kwargs["aws_secret_access_key"] = self._secret_access_key
            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    def object_url(self, bucket: str, key: str) -> str:
        """Public URL of ``key`` in ``bucket``."""
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url}/{bucket}/{key}"
        return f"https://{bucket}.s3.amazonaws.com/{key}"

    async def put(self, local_path: Path, bucket: str, key: str) -> str:
        """Upload ``local_path`` to ``s3://bucket/key``."""
        logger.info(
            "Uploading file to S3",
            extra={"bucket": bucket, "key": key, "temp_path": str(local_path)},
        )
        try:
            client = self._get_client()
            await asyncio.to_thread(client.upload_file, str(local_path), bucket, key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                "S3 rejected upload",
                extra={"bucket": bucket, "key": key, "error_code": code, "error": str(e)},
            )
            raise ObjectStoreError(f"S3 operation failed ({code}): {e}") from e
        except (Boto3Error, BotoCoreError) as e:
            logger.error(
                "S3 upload failed",
                extra={"bucket": bucket, "key": key, "error": str(e)},
            )
            raise ObjectStoreError(f"S3 operation failed: {e}") from e

        url = self.object_url(bucket, key)
        logger.info("File uploaded to S3", extra={"s3_url": url})
        return url

    def get_backend_name(self) -> str:
        return "s3"
