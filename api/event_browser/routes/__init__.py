"""API routers for the Event Store Browser API."""

from .streams import streams_router
from .events import events_router

__all__ = ["streams_router", "events_router"]
