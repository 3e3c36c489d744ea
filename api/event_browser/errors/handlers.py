"""Exception handlers for the Event Store Browser API."""

import logging
from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from ..pagination.exceptions import AnchorNotFoundError
from .problem_details import (
    ProblemDetailException,
    UnknownAnchorError,
    create_problem_response
)

logger = logging.getLogger(__name__)


STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout"
}


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def anchor_not_found_exception_handler(
    request: Request,
    exc: AnchorNotFoundError
) -> JSONResponse:
    """Map an unresolvable pagination anchor to a 404 problem."""
    logger.info(
        f"Anchor not found: {exc.event_id} in stream {exc.stream.name}",
        extra={
            "path": str(request.url.path),
            "method": request.method
        }
    )
    return UnknownAnchorError(exc.stream.name, exc.event_id).to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI HTTPException and Starlette HTTPException."""
    logger.info(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )

    title = STATUS_TITLES.get(exc.status_code, "HTTP Error")
    detail = str(exc.detail) if exc.detail else None

    response = create_problem_response(
        status=exc.status_code,
        title=title,
        detail=detail,
        request=request
    )

    if getattr(exc, "headers", None):
        for key, value in exc.headers.items():
            response.headers[key] = value

    return response


def _format_errors(errors) -> str:
    messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
    return "; ".join(messages)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (bad path or query parameters)."""
    logger.info(
        f"Validation error: {len(exc.errors())} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": exc.errors()
        }
    )

    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + _format_errors(exc.errors()),
        request=request,
        validation_errors=jsonable_encoder(exc.errors())
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle direct Pydantic validation errors."""
    logger.info(
        f"Pydantic validation error: {len(exc.errors())} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": exc.errors()
        }
    )

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail="Data validation failed: " + _format_errors(exc.errors()),
        request=request,
        validation_errors=jsonable_encoder(exc.errors())
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details in production
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""

    # Custom Problem Detail exceptions
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)

    # Pagination domain errors
    app.add_exception_handler(AnchorNotFoundError, anchor_not_found_exception_handler)

    # FastAPI and Starlette HTTP exceptions
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Validation exceptions
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
