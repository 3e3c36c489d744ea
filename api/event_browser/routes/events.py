"""Single event API endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..dependencies import Repository
from ..errors.problem_details import UnknownEventError
from ..models.events import EventDocument, EventResource, JSON_API_MEDIA_TYPE


logger = logging.getLogger(__name__)

events_router = APIRouter(
    prefix="/events",
    tags=["Events"],
    responses={
        404: {"description": "Not Found"}
    }
)


@events_router.get(
    "/{event_id:path}",
    name="get_event",
    response_model=EventDocument,
    summary="Get an event",
    description="Retrieve a single event by id, regardless of the streams it belongs to.",
    responses={
        200: {"description": "Event retrieved successfully"},
        404: {"description": "Event not found"}
    }
)
async def get_event_by_id(event_id: str, repository: Repository) -> JSONResponse:
    """Get a specific event by ID.

    Raises:
        UnknownEventError: If no event has this id
    """
    logger.info(f"Getting event {event_id}")

    event = await repository.get_event(event_id)
    if event is None:
        raise UnknownEventError(event_id)

    document = EventDocument(data=EventResource.from_event(event))
    return JSONResponse(content=document.model_dump(), media_type=JSON_API_MEDIA_TYPE)
