"""Data models for the Event Store Browser API."""

from .events import (
    Event,
    EventRow,
    EventAttributes,
    EventResource,
    EventDocument,
    EventListDocument,
    format_timestamp,
    JSON_API_MEDIA_TYPE
)
from .streams import (
    GLOBAL_STREAM_NAME,
    GlobalStream,
    NamedStream,
    Stream,
    parse_stream
)

__all__ = [
    "Event",
    "EventRow",
    "EventAttributes",
    "EventResource",
    "EventDocument",
    "EventListDocument",
    "format_timestamp",
    "JSON_API_MEDIA_TYPE",
    "GLOBAL_STREAM_NAME",
    "GlobalStream",
    "NamedStream",
    "Stream",
    "parse_stream"
]
