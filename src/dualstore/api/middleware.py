"""Middleware for HTTP error logging."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class HTTPErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure all HTTP errors are logged.

    - 4xx responses: logged at WARN level
    - 5xx responses: logged at ERROR level
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log errors.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            HTTP response
        """
        start_time = time.time()

        # Upload bodies are streamed by the route, so only headers are read here
        content_length = request.headers.get("content-length")

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000

        # Request details shared by both log levels
        log_extra = {
            "http_status": response.status_code,
            "method": request.method,
            "path": request.url.path,
            "content_length": content_length,
            "duration_ms": duration_ms,
        }

        # Log errors based on status code
        if 400 <= response.status_code < 500:
            # 4xx: Client errors - log at WARN level
            logger.warning("Client error response", extra=log_extra)
        elif response.status_code >= 500:
            # 5xx: Server errors - log at ERROR level
            logger.error("Server error response", extra=log_extra)

        return response
