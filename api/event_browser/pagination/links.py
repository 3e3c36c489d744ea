"""JSON:API pagination links for stream pages."""

from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from ..models.events import Event
from ..models.streams import Stream
from .cursor import Anchor, Direction


UrlBuilder = Callable[[Stream, Anchor, Direction, int], str]

LINK_RELATIONS = ("first", "last", "next", "prev")


def stream_path(stream: Stream, anchor: Anchor, direction: Direction, count: int) -> str:
    """Path of a stream page; the stream name is escaped except for ``/``."""
    return f"/streams/{quote(stream.name, safe='/')}/{quote(str(anchor), safe='')}/{direction.value}/{count}"


def default_url_builder(stream: Stream, anchor: Anchor, direction: Direction, count: int) -> str:
    """Build a relative link to a stream page."""
    return stream_path(stream, anchor, direction, count)


def build_links(
    stream: Stream,
    direction: Direction,
    count: int,
    events: List[Event],
    has_more_same_direction: bool,
    has_more_opposite_direction: bool,
    url_builder: UrlBuilder = default_url_builder
) -> Dict[str, str]:
    """Build the ``links`` member for a page of events.

    ``first``/``prev`` are emitted only when newer events exist outside the
    page, ``last``/``next`` only when older ones do. ``prev`` continues
    forward from the newest event of the page, ``next`` backward from the
    oldest. An empty page has no links.

    Args:
        stream: Stream the page was read from
        direction: Direction the page was requested in
        count: Page size, carried over to every link
        events: The page, newest first
        has_more_same_direction: Events exist beyond the page in ``direction``
        has_more_opposite_direction: Events exist beyond the page against ``direction``
        url_builder: Renders a (stream, anchor, direction, count) link

    Returns:
        Mapping of link relation to URL, containing only applicable keys
    """
    links: Dict[str, str] = {}
    if not events:
        return links

    if direction is Direction.BACKWARD:
        has_older, has_newer = has_more_same_direction, has_more_opposite_direction
    else:
        has_older, has_newer = has_more_opposite_direction, has_more_same_direction

    if has_newer:
        links["first"] = url_builder(stream, Anchor.head(), Direction.BACKWARD, count)
    if has_older:
        links["last"] = url_builder(stream, Anchor.head(), Direction.FORWARD, count)
        links["next"] = url_builder(stream, Anchor(events[-1].event_id), Direction.BACKWARD, count)
    if has_newer:
        links["prev"] = url_builder(stream, Anchor(events[0].event_id), Direction.FORWARD, count)

    return links


def create_link_header(links: Dict[str, str]) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        links: Mapping of link relation to URL

    Returns:
        Link header value or None if no links
    """
    values = [f'<{links[rel]}>; rel="{rel}"' for rel in LINK_RELATIONS if rel in links]
    return ", ".join(values) if values else None
