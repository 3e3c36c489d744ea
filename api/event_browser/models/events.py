"""Pydantic models for events and their JSON:API representation."""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from uuid import uuid4

from pydantic import BaseModel, Field, ConfigDict


JSON_API_MEDIA_TYPE = "application/vnd.api+json"
EVENT_RESOURCE_TYPE = "events"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Event(BaseModel):
    """An immutable domain event as recorded in the event store."""

    event_id: str = Field(default_factory=lambda: str(uuid4()), description="Globally unique event identifier")
    event_type: str = Field(description="Event type tag")
    data: Dict[str, Any] = Field(default_factory=dict, description="Event payload")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Event metadata")
    timestamp: datetime = Field(default_factory=_utcnow, description="Creation timestamp")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "event_id": "a562dc5c-97c0-4fe9-8b81-10f9bd0e825f",
                "event_type": "OrderPlaced",
                "data": {"order_id": 42, "total": 19.99},
                "metadata": {"correlation_id": "2f1b0c1e"},
                "timestamp": "2024-01-01T12:00:00.123Z"
            }
        }
    )


class EventRow(BaseModel):
    """Model representing an events table row."""

    id: str
    event_type: str
    data: Dict[str, Any]
    metadata: Dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_event(self) -> Event:
        """Convert to the public Event model."""
        return Event(
            event_id=self.id,
            event_type=self.event_type,
            data=self.data,
            metadata=self.metadata,
            timestamp=self.created_at
        )


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO 8601 UTC with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# JSON:API documents

class EventAttributes(BaseModel):
    """Attributes of an event resource."""

    event_type: str
    data: Dict[str, Any]
    metadata: Dict[str, Any]


class EventResource(BaseModel):
    """JSON:API resource object for a single event."""

    id: str
    type: str = EVENT_RESOURCE_TYPE
    attributes: EventAttributes

    @classmethod
    def from_event(cls, event: Event) -> "EventResource":
        """Build the resource object, folding the timestamp into metadata."""
        metadata = dict(event.metadata)
        metadata["timestamp"] = format_timestamp(event.timestamp)
        return cls(
            id=event.event_id,
            attributes=EventAttributes(
                event_type=event.event_type,
                data=event.data,
                metadata=metadata
            )
        )


class EventDocument(BaseModel):
    """JSON:API top-level document holding one event."""

    data: EventResource


class EventListDocument(BaseModel):
    """JSON:API top-level document holding a page of events."""

    data: List[EventResource] = Field(description="Events, newest first")
    links: Dict[str, str] = Field(default_factory=dict, description="Pagination links (first, last, next, prev)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [
                    {
                        "id": "a562dc5c-97c0-4fe9-8b81-10f9bd0e825f",
                        "type": "events",
                        "attributes": {
                            "event_type": "OrderPlaced",
                            "data": {"order_id": 42},
                            "metadata": {"timestamp": "2024-01-01T12:00:00.123Z"}
                        }
                    }
                ],
                "links": {
                    "last": "http://localhost:8000/streams/orders/head/forward/20",
                    "next": "http://localhost:8000/streams/orders/a562dc5c-97c0-4fe9-8b81-10f9bd0e825f/backward/20"
                }
            }
        }
    )

    @classmethod
    def from_page(cls, events: List[Event], links: Optional[Dict[str, str]] = None) -> "EventListDocument":
        """Build the document for a page of events."""
        return cls(
            data=[EventResource.from_event(event) for event in events],
            links=links or {}
        )
