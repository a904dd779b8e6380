"""Upload API routes."""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.requests import ClientDisconnect

from dualstore.core.config import settings
from dualstore.models.upload import UploadResponse
from dualstore.storage.factory import get_content_store, get_object_store
from dualstore.upload.exceptions import (
    BackendError,
    MultipartError,
    NoFileError,
    SizeLimitExceeded,
    UploadServiceError,
)
from dualstore.upload.orchestrator import UploadOrchestrator

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


def get_upload_orchestrator() -> UploadOrchestrator:
    """Build the orchestrator from the configured settings and backends."""
    return UploadOrchestrator(settings.upload_config, get_object_store(), get_content_store())


async def _request_body(request: Request) -> AsyncIterator[bytes]:
    try:
        async for chunk in request.stream():
            yield chunk
    except ClientDisconnect as e:
        raise MultipartError("Client disconnected before the upload finished") from e


@router.post("/upload", response_model=UploadResponse, status_code=200)
async def upload_file(
    request: Request,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> UploadResponse:
    """Store one multipart ``file`` field in the object store and on IPFS."""
    try:
        return await orchestrator.handle_upload(
            request.headers.get("content-type"), _request_body(request)
        )

    except (NoFileError, MultipartError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except SizeLimitExceeded as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))

    except BackendError as e:
        logger.error(
            "Storage backend failed",
            extra={"backend": e.backend, "error": str(e), "http_status": 502},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to store file: {e}",
        )

    except UploadServiceError as e:
        logger.error(
            "Upload failed",
            extra={"error_type": type(e).__name__, "error": str(e), "http_status": 500},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process upload",
        )

    except Exception as e:
        logger.error(f"Unexpected error during upload: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
