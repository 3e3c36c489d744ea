"""Stream pagination entry point."""

import logging
from typing import Dict, List, NamedTuple

from ..models.events import Event
from ..models.streams import Stream
from ..repository.base import EventRepository
from .cursor import Anchor, Direction, resolve_cursor
from .links import UrlBuilder, build_links, default_url_builder
from .window import fetch_window


logger = logging.getLogger(__name__)


class Page(NamedTuple):
    """A page of events (newest first) and its pagination links."""
    events: List[Event]
    links: Dict[str, str]


async def paginate(
    repository: EventRepository,
    stream: Stream,
    anchor: Anchor,
    direction: Direction,
    count: int,
    url_builder: UrlBuilder = default_url_builder
) -> Page:
    """Resolve the anchor, fetch the window and build its links.

    Raises:
        AnchorNotFoundError: If ``anchor`` names an event outside ``stream``

    All reads share one repository snapshot. Repository failures propagate
    unchanged.
    """
    async with repository.snapshot():
        cursor = await resolve_cursor(repository, stream, anchor)
        window = await fetch_window(repository, stream, cursor, direction, count)

    links = build_links(
        stream,
        direction,
        count,
        window.events,
        window.has_more_same_direction,
        window.has_more_opposite_direction,
        url_builder
    )

    logger.debug(
        f"Paginated stream {stream.name} from {anchor} {direction.value} by {count}: "
        f"{len(window.events)} events, links {sorted(links)}"
    )
    return Page(window.events, links)
