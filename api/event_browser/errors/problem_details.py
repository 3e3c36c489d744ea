"""Problem Details (RFC 9457) for the Event Store Browser API.

Every error the API answers with is a ``ProblemDetailException``. Generic
HTTP failures use the ``about:blank`` type; failures specific to browsing
the event store carry a ``ProblemType`` URI so clients can tell an unknown
anchor from an unknown route without parsing ``detail``.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_JSON = "application/problem+json"


class ProblemType(str, Enum):
    """Problem type URIs for event store specific failures."""

    ANCHOR_NOT_FOUND = "/problems/anchor-not-found"
    EVENT_NOT_FOUND = "/problems/event-not-found"
    PAGE_SIZE_EXCEEDED = "/problems/page-size-exceeded"
    EVENT_STORE_ERROR = "/problems/event-store-error"
    EVENT_STORE_UNAVAILABLE = "/problems/event-store-unavailable"


class ProblemDetail(BaseModel):
    """Problem Details document; unknown keys are kept as extension members."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    model_config = {"extra": "allow"}

    def to_response(self) -> JSONResponse:
        """Render as an ``application/problem+json`` response."""
        return JSONResponse(
            status_code=self.status,
            content=self.model_dump(exclude_none=True),
            headers={"Content-Type": PROBLEM_JSON}
        )


class ProblemDetailException(Exception):
    """An error that renders itself as a Problem Details response.

    Args:
        status: HTTP status code
        title: Summary of the problem type
        detail: Explanation of this occurrence
        type_uri: Problem type, ``about:blank`` for plain HTTP semantics
        instance: Request path; filled from the request when omitted
        **extensions: Extra members, e.g. the offending ``event_id``
    """

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance,
            **self.extensions
        )

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        return self.to_problem_detail(request).to_response()


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    def __init__(self, detail: str, type_uri: str = "about:blank", **extensions: Any):
        super().__init__(status=400, title="Bad Request", detail=detail, type_uri=type_uri, **extensions)


class NotFoundError(ProblemDetailException):
    """404 Not Found error."""

    def __init__(self, detail: str = "Resource not found", type_uri: str = "about:blank", **extensions: Any):
        super().__init__(status=404, title="Not Found", detail=detail, type_uri=type_uri, **extensions)


class InternalServerError(ProblemDetailException):
    """500 Internal Server Error."""

    def __init__(self, detail: str = "Internal server error", type_uri: str = "about:blank", **extensions: Any):
        super().__init__(status=500, title="Internal Server Error", detail=detail, type_uri=type_uri, **extensions)


class ServiceUnavailableError(ProblemDetailException):
    """503 Service Unavailable error."""

    def __init__(
        self,
        detail: str = "Service temporarily unavailable",
        type_uri: str = "about:blank",
        **extensions: Any
    ):
        super().__init__(status=503, title="Service Unavailable", detail=detail, type_uri=type_uri, **extensions)


class PageSizeExceededError(BadRequestError):
    """A page was requested with more events than ``max_page_size``."""

    def __init__(self, count: int, max_page_size: int):
        super().__init__(
            f"Page size {count} exceeds the maximum of {max_page_size}",
            type_uri=ProblemType.PAGE_SIZE_EXCEEDED.value,
            max_page_size=max_page_size
        )


class UnknownAnchorError(NotFoundError):
    """The anchor of a page request is not a member of the stream."""

    def __init__(self, stream_name: str, event_id: str):
        super().__init__(
            f"Event '{event_id}' not found in stream '{stream_name}'",
            type_uri=ProblemType.ANCHOR_NOT_FOUND.value,
            stream=stream_name,
            event_id=event_id
        )


class UnknownEventError(NotFoundError):
    """No event has the requested id."""

    def __init__(self, event_id: str):
        super().__init__(
            f"Event '{event_id}' not found",
            type_uri=ProblemType.EVENT_NOT_FOUND.value,
            event_id=event_id
        )


class EventStoreError(InternalServerError):
    """The event store backend failed while serving a request."""

    def __init__(self, error: Exception):
        super().__init__(f"Database error: {error}", type_uri=ProblemType.EVENT_STORE_ERROR.value)


class EventStoreUnavailableError(ServiceUnavailableError):
    """The event store did not answer a health probe."""

    def __init__(self, detail: str, error: Exception):
        super().__init__(
            detail,
            type_uri=ProblemType.EVENT_STORE_UNAVAILABLE.value,
            event_store_error=str(error)
        )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response for an error raised outside the API's own exceptions."""
    error = ProblemDetailException(status, title, detail, type_uri, instance, **extensions)
    return error.to_response(request)
