"""Pagination errors."""

from ..models.streams import Stream


class AnchorNotFoundError(Exception):
    """The anchor event is not a member of the requested stream."""

    def __init__(self, stream: Stream, event_id: str):
        self.stream = stream
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' not found in stream '{stream.name}'")
