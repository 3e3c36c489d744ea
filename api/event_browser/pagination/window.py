"""Window fetching: read one page of a stream and probe both of its sides."""

from typing import List, NamedTuple, Optional

from ..models.events import Event
from ..models.streams import Stream
from ..repository.base import EventRepository, Heading
from .cursor import Direction


class Window(NamedTuple):
    """A page of events (newest first) plus what lies beyond it."""
    events: List[Event]
    has_more_same_direction: bool
    has_more_opposite_direction: bool


EMPTY_WINDOW = Window([], False, False)


async def fetch_window(
    repository: EventRepository,
    stream: Stream,
    cursor: Optional[int],
    direction: Direction,
    count: int
) -> Window:
    """Fetch up to ``count`` events beyond ``cursor`` in ``direction``.

    Existence beyond the page is probed from the page's own edges: past the
    farthest entry read for the same direction, and past the first entry read
    for the opposite one. An empty page reports nothing on either side.
    """
    if count <= 0:
        return EMPTY_WINDOW

    heading = direction.heading
    entries = await repository.read(stream, cursor, heading, count)
    if not entries:
        return EMPTY_WINDOW

    has_more_same = await repository.has_events(stream, entries[-1].position, heading)
    has_more_opposite = await repository.has_events(stream, entries[0].position, heading.opposite)

    events = [entry.event for entry in entries]
    if heading is Heading.TOWARD_END:
        events.reverse()

    return Window(events, has_more_same, has_more_opposite)
