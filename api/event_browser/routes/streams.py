"""Stream browsing API endpoints."""

import logging
from typing import Annotated, Tuple
from urllib.parse import quote, unquote

from fastapi import APIRouter, Path, Request
from fastapi.responses import JSONResponse
from starlette.convertors import Convertor, register_url_convertor

from ..dependencies import AppSettings, Repository
from ..errors.problem_details import PageSizeExceededError
from ..models.events import EventListDocument, JSON_API_MEDIA_TYPE
from ..models.streams import Stream, parse_stream
from ..pagination import (
    Anchor, Direction, UrlBuilder, create_link_header, paginate
)
from ..repository.base import EventRepository


logger = logging.getLogger(__name__)


class DirectionConvertor(Convertor):
    """Path convertor matching only ``forward`` and ``backward``.

    Any other trailing segments fall through to the bare stream route, so
    ``/streams/tenant/orders/2024/q1`` names a stream rather than a page.
    """

    regex = "|".join(direction.value for direction in Direction)

    def convert(self, value: str) -> Direction:
        return Direction(value)

    def to_string(self, value) -> str:
        return Direction(value).value


register_url_convertor("direction", DirectionConvertor())

streams_router = APIRouter(
    prefix="/streams",
    tags=["Streams"],
    responses={
        404: {"description": "Anchor event not found in stream"},
        422: {"description": "Page size below 1"}
    }
)


def page_path_params(request: Request, stream_name: str, position: str) -> Tuple[str, str]:
    """Split stream name and anchor from the undecoded request path.

    Routing runs on the percent-decoded path, where an event id such as
    ``x%2F2`` has already become two segments. The last three raw segments
    are always position, direction and count.
    """
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return stream_name, position

    head, raw_position, _, _ = raw_path.decode("utf-8").rsplit("/", 3)
    _, _, raw_stream = head.partition(f"{streams_router.prefix}/")
    return unquote(raw_stream), unquote(raw_position)


def request_url_builder(request: Request) -> UrlBuilder:
    """Build absolute page links through the router, based on the request URL."""
    def build(stream: Stream, anchor: Anchor, direction: Direction, count: int) -> str:
        return str(request.url_for(
            "get_stream_page",
            stream_name=quote(stream.name, safe="/"),
            position=quote(str(anchor), safe=""),
            direction=direction.value,
            count=str(count)
        ))
    return build


async def render_stream_page(
    request: Request,
    repository: EventRepository,
    stream_name: str,
    anchor: Anchor,
    direction: Direction,
    count: int
) -> JSONResponse:
    """Paginate a stream and render the JSON:API document."""
    stream = parse_stream(stream_name)
    page = await paginate(
        repository,
        stream,
        anchor,
        direction,
        count,
        url_builder=request_url_builder(request)
    )

    document = EventListDocument.from_page(page.events, page.links)
    headers = {}
    link_header = create_link_header(page.links)
    if link_header:
        headers["Link"] = link_header

    logger.info(f"Retrieved {len(page.events)} events from stream '{stream.name}'")
    return JSONResponse(
        content=document.model_dump(),
        media_type=JSON_API_MEDIA_TYPE,
        headers=headers
    )


@streams_router.get(
    "/{stream_name:path}/{position}/{direction:direction}/{count:int}",
    name="get_stream_page",
    response_model=EventListDocument,
    summary="Browse a stream page",
    description="Page through a stream from an anchor (head or an event id) in a direction.",
    responses={
        200: {"description": "Page retrieved successfully"},
        400: {"description": "Bad Request - Page size above the configured maximum"}
    }
)
async def get_stream_page(
    stream_name: str,
    position: str,
    direction: Direction,
    count: Annotated[int, Path(ge=1, description="Number of events per page")],
    request: Request,
    repository: Repository,
    settings: AppSettings
) -> JSONResponse:
    """Browse a page of a stream.

    Pages are always ordered newest first. ``backward`` reads toward older
    events and ``forward`` toward newer ones; ``head`` anchors at the edge
    the read starts from. The stream ``all`` is the global stream.

    Args:
        stream_name: Name of the stream, or ``all``
        position: ``head`` or the id of an event in the stream
        direction: ``forward`` or ``backward``
        count: Page size
        request: FastAPI request object
        repository: Event repository
        settings: Application settings

    Returns:
        JSON:API document with ``data`` and ``links``

    Raises:
        PageSizeExceededError: If the page size exceeds ``max_page_size``
        AnchorNotFoundError: If the anchor event is not in the stream
    """
    stream_name, position = page_path_params(request, stream_name, position)
    logger.info(f"Browsing stream '{stream_name}' from {position} {direction.value} by {count}")

    if count > settings.max_page_size:
        raise PageSizeExceededError(count, settings.max_page_size)

    return await render_stream_page(
        request, repository, stream_name, Anchor.parse(position), direction, count
    )


@streams_router.get(
    "/{stream_name:path}",
    name="get_stream",
    response_model=EventListDocument,
    summary="Browse the newest events of a stream",
    description="Equivalent to /streams/{stream_name}/head/backward/{default_page_size}.",
    responses={
        200: {"description": "Page retrieved successfully"}
    }
)
async def get_stream(
    stream_name: str,
    request: Request,
    repository: Repository,
    settings: AppSettings
) -> JSONResponse:
    """Browse the first (newest) page of a stream."""
    logger.info(f"Browsing stream '{stream_name}'")
    return await render_stream_page(
        request,
        repository,
        stream_name,
        Anchor.head(),
        Direction.BACKWARD,
        settings.default_page_size
    )
