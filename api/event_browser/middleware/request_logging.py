"""Request logging middleware."""

import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log method, path, status and duration of each request."""

    def __init__(self, app, skip_paths=None):
        super().__init__(app)
        self.skip_paths = set(skip_paths or [])

    async def dispatch(self, request: Request, call_next):
        """Time the request and log the outcome."""
        if request.url.path in self.skip_paths:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"{request.method} {request.url.path} failed after {elapsed_ms:.1f}ms")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)",
            extra={
                "method": request.method,
                "path": str(request.url.path),
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 1)
            }
        )
        return response
