"""Request logging middleware."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(
                f"Request failed: {request.method} {request.url.path} after {duration_ms}ms",
                extra={"request_id": request_id, "error": str(e)},
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"-> {response.status_code} in {duration_ms}ms",
            extra={"request_id": request_id},
        )

        response.headers["X-Request-ID"] = request_id
        return response
