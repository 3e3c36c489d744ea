"""Cursor primitives for stream pagination: anchors, directions and resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models.streams import Stream
from ..repository.base import EventRepository, Heading
from .exceptions import AnchorNotFoundError


HEAD = "head"


class Direction(str, Enum):
    """Traversal direction as it appears in URLs.

    ``backward`` walks toward older events, ``forward`` toward newer ones.
    """

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def heading(self) -> Heading:
        """The physical read direction along the stream."""
        if self is Direction.BACKWARD:
            return Heading.TOWARD_START
        return Heading.TOWARD_END

    @property
    def opposite(self) -> "Direction":
        if self is Direction.BACKWARD:
            return Direction.FORWARD
        return Direction.BACKWARD


@dataclass(frozen=True)
class Anchor:
    """Either the ``head`` sentinel (no event id) or a specific event id."""

    event_id: Optional[str] = None

    @classmethod
    def head(cls) -> "Anchor":
        return cls()

    @classmethod
    def parse(cls, value: str) -> "Anchor":
        """Parse the anchor segment of a stream URL."""
        if value == HEAD:
            return cls.head()
        return cls(event_id=value)

    @property
    def is_head(self) -> bool:
        return self.event_id is None

    def __str__(self) -> str:
        return HEAD if self.event_id is None else self.event_id


async def resolve_cursor(
    repository: EventRepository,
    stream: Stream,
    anchor: Anchor
) -> Optional[int]:
    """Resolve an anchor to a position within a stream.

    Args:
        repository: Event repository to look the anchor up in
        stream: Stream the anchor must belong to
        anchor: Head sentinel or event id

    Returns:
        The anchor event's position, or None for ``head`` (the edge the read
        starts from; head always resolves, even for an empty stream)

    Raises:
        AnchorNotFoundError: If the event is not a member of the stream
    """
    if anchor.is_head:
        return None

    position = await repository.position_of(stream, anchor.event_id)
    if position is None:
        raise AnchorNotFoundError(stream, anchor.event_id)
    return position
