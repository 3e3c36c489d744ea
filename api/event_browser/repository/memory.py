"""In-memory event repository, used for development and tests."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional, Union

from ..models.events import Event
from ..models.streams import GLOBAL_STREAM_NAME, Stream
from .base import Heading, StreamEntry
from .exceptions import EventDuplicatedError, EventNotFoundError


logger = logging.getLogger(__name__)


class InMemoryEventRepository:
    """Keeps the global stream and every named stream as ordered lists.

    A named stream is a list of event ids; an event's position in a stream is
    its index in that list.
    """

    def __init__(self) -> None:
        self._events: Dict[str, Event] = {}
        self._global: List[str] = []
        self._streams: Dict[str, List[str]] = {}

    def publish(
        self,
        events: Union[Event, Iterable[Event]],
        stream_name: Optional[str] = None
    ) -> None:
        """Append events to the global stream and, optionally, to a named stream."""
        if isinstance(events, Event):
            events = [events]
        events = list(events)

        seen = set()
        for event in events:
            if event.event_id in self._events or event.event_id in seen:
                raise EventDuplicatedError(event.event_id, GLOBAL_STREAM_NAME)
            seen.add(event.event_id)

        for event in events:
            self._events[event.event_id] = event
            self._global.append(event.event_id)

        if stream_name is not None:
            self.link([event.event_id for event in events], stream_name)

        logger.debug(f"Published {len(events)} events (stream: {stream_name or GLOBAL_STREAM_NAME})")

    def link(self, event_ids: Union[str, Iterable[str]], stream_name: str) -> None:
        """Append already published events to a named stream."""
        if isinstance(event_ids, str):
            event_ids = [event_ids]
        event_ids = list(event_ids)

        stream = self._streams.get(stream_name, [])
        seen = set(stream)
        for event_id in event_ids:
            if event_id not in self._events:
                raise EventNotFoundError(event_id)
            if event_id in seen:
                raise EventDuplicatedError(event_id, stream_name)
            seen.add(event_id)

        self._streams[stream_name] = stream + event_ids

    def _ids(self, stream: Stream) -> List[str]:
        if stream.is_global:
            return self._global
        return self._streams.get(stream.name, [])

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[None]:
        # Reads never await, so no append can land between them
        yield

    async def position_of(self, stream: Stream, event_id: str) -> Optional[int]:
        try:
            return self._ids(stream).index(event_id)
        except ValueError:
            return None

    def _positions(self, stream: Stream, after: Optional[int], heading: Heading) -> range:
        size = len(self._ids(stream))
        if heading is Heading.TOWARD_START:
            start = size - 1 if after is None else min(after, size) - 1
            return range(start, -1, -1)
        start = 0 if after is None else max(after + 1, 0)
        return range(start, size)

    async def read(
        self,
        stream: Stream,
        after: Optional[int],
        heading: Heading,
        count: int
    ) -> List[StreamEntry]:
        ids = self._ids(stream)
        positions = self._positions(stream, after, heading)[:max(count, 0)]
        return [StreamEntry(position, self._events[ids[position]]) for position in positions]

    async def has_events(self, stream: Stream, after: Optional[int], heading: Heading) -> bool:
        return len(self._positions(stream, after, heading)) > 0

    async def get_event(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    async def ping(self) -> None:
        return None
