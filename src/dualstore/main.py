"""Main application entrypoint for the dualstore upload service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from dualstore.api.middleware import HTTPErrorLoggingMiddleware
from dualstore.api.v1 import routes_health
from dualstore.api.v1.routes_upload import router as upload_router
from dualstore.core.config import settings
from dualstore.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the transient directory and log service startup and shutdown."""
    Path(settings.TEMP_DIR).mkdir(parents=True, exist_ok=True)
    logger.info(
        "Upload service started",
        extra={
            "environment": settings.ENV,
            "storage_backend": settings.STORAGE_BACKEND,
            "bucket": settings.S3_BUCKET,
            "max_file_size": settings.MAX_FILE_SIZE,
            "temp_dir": settings.TEMP_DIR,
        },
    )
    yield
    logger.info("Upload service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(HTTPErrorLoggingMiddleware)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(upload_router)

    return app


# Export app instance for ASGI servers
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
