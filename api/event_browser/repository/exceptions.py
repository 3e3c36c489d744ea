"""Event repository exceptions."""


class EventRepositoryError(Exception):
    """Base class for event repository errors."""


class EventNotFoundError(EventRepositoryError):
    """Raised when linking an event that was never published."""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' not found")


class EventDuplicatedError(EventRepositoryError):
    """Raised when an event id is published twice or linked twice to one stream."""

    def __init__(self, event_id: str, stream_name: str):
        self.event_id = event_id
        self.stream_name = stream_name
        super().__init__(f"Event '{event_id}' already present in stream '{stream_name}'")
