"""Read contract for the ordered event log.

Repositories expose windowed reads over a stream. Positions are ordinals
within the stream being read: they are only ever compared, so backends may
use sparse positions as long as the order is total.
"""

from enum import Enum
from typing import AsyncContextManager, List, NamedTuple, Optional, Protocol

from ..models.events import Event
from ..models.streams import Stream


class Heading(str, Enum):
    """Physical read direction along a stream."""

    TOWARD_START = "toward_start"
    TOWARD_END = "toward_end"

    @property
    def opposite(self) -> "Heading":
        if self is Heading.TOWARD_START:
            return Heading.TOWARD_END
        return Heading.TOWARD_START


class StreamEntry(NamedTuple):
    """An event together with its position in the stream it was read from."""
    position: int
    event: Event


class EventRepository(Protocol):
    """Read-only access to an append-only event log.

    ``after`` is an exclusive bound. ``None`` means the edge of the stream
    the read starts from: the newest end when heading toward the start, the
    oldest end when heading toward the end. Unknown named streams read as
    empty.
    """

    def snapshot(self) -> AsyncContextManager[None]:
        """Serve every read made inside the block from one consistent view of the log."""
        ...

    async def position_of(self, stream: Stream, event_id: str) -> Optional[int]:
        """Position of ``event_id`` within ``stream``, or None if not a member."""
        ...

    async def read(
        self,
        stream: Stream,
        after: Optional[int],
        heading: Heading,
        count: int
    ) -> List[StreamEntry]:
        """Read up to ``count`` entries beyond ``after``, in traversal order."""
        ...

    async def has_events(self, stream: Stream, after: Optional[int], heading: Heading) -> bool:
        """Whether at least one entry lies beyond ``after`` in ``heading``."""
        ...

    async def get_event(self, event_id: str) -> Optional[Event]:
        """Look up a single event by id."""
        ...

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""
        ...
