"""Error handling module for the Event Store Browser API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    ProblemType,
    BadRequestError,
    NotFoundError,
    InternalServerError,
    ServiceUnavailableError,
    PageSizeExceededError,
    UnknownAnchorError,
    UnknownEventError,
    EventStoreError,
    EventStoreUnavailableError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "ProblemType",
    "BadRequestError",
    "NotFoundError",
    "InternalServerError",
    "ServiceUnavailableError",
    "PageSizeExceededError",
    "UnknownAnchorError",
    "UnknownEventError",
    "EventStoreError",
    "EventStoreUnavailableError",
    "create_problem_response",
    "register_exception_handlers"
]
