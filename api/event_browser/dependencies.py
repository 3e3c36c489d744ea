"""FastAPI dependencies for the Event Store Browser API."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from .config import Settings, get_settings
from .errors.problem_details import ServiceUnavailableError
from .repository.base import EventRepository


logger = logging.getLogger(__name__)


def get_repository(request: Request) -> EventRepository:
    """Get the event repository attached to the application.

    Raises:
        ServiceUnavailableError: If the repository has not been initialized
    """
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        logger.error("Event repository requested before initialization")
        raise ServiceUnavailableError(detail="Event store not initialized")
    return repository


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


Repository = Annotated[EventRepository, Depends(get_repository)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
