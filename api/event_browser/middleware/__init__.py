"""HTTP middleware for the Event Store Browser API."""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
