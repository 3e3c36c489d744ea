"""Main FastAPI application for the Event Store Browser."""

import logging
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

import yaml
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .dependencies import Repository
from .errors import register_exception_handlers
from .errors.problem_details import EventStoreUnavailableError, ServiceUnavailableError
from .middleware.request_logging import RequestLoggingMiddleware
from .repository.base import EventRepository
from .repository.connection import db_manager
from .repository.memory import InMemoryEventRepository
from .repository.postgres import PostgresEventRepository
from .routes import streams_router, events_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=get_settings().log_format
)
logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"
HEALTH_PATHS = ["/health", "/ready", "/live"]


def load_openapi_spec() -> Dict[str, Any]:
    """Load the custom OpenAPI specification from YAML file."""
    openapi_file = Path(__file__).parent.parent / "openapi" / "event-browser.yaml"

    try:
        with open(openapi_file, 'r') as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"OpenAPI spec file not found at {openapi_file}, using auto-generated spec")
        return {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse OpenAPI spec: {e}, using auto-generated spec")
        return {}


def build_repository(settings: Settings) -> EventRepository:
    """Create the event repository for the configured backend."""
    if settings.event_store_backend == "postgres":
        return PostgresEventRepository()
    return InMemoryEventRepository()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name}")

    # Configure logging level from settings
    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    if getattr(app.state, "repository", None) is None:
        app.state.repository = build_repository(settings)
        logger.info(f"Using {settings.event_store_backend} event store")

    if settings.event_store_backend == "postgres":
        try:
            await db_manager.initialize()
            await app.state.repository.ping()
            logger.info("Database connectivity verified")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    yield

    logger.info(f"Shutting down {settings.app_name}")
    if settings.event_store_backend == "postgres":
        try:
            await db_manager.close()
            logger.info("Database connections closed")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[EventRepository] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-derived ones
        repository: Event repository to serve; built from settings at startup if omitted
    """
    settings = settings or get_settings()
    custom_openapi = load_openapi_spec()
    info = custom_openapi.get("info", {})

    app = FastAPI(
        title=info.get("title", settings.app_name),
        description=info.get("description", "Read-only JSON:API browser over an append-only event store"),
        version=info.get("version", SERVICE_VERSION),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.repository = repository

    if custom_openapi:
        # Serve our spec with the server URL matching the configured host and port
        def get_custom_openapi():
            spec = dict(custom_openapi)
            if spec.get('servers'):
                spec['servers'] = [{**spec['servers'][0], 'url': f"http://{settings.host}:{settings.port}"}]
            return spec

        app.openapi = get_custom_openapi

    app.add_middleware(RequestLoggingMiddleware, skip_paths=HEALTH_PATHS)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    app.include_router(streams_router)
    app.include_router(events_router)

    @app.get("/health", tags=["Health"])
    async def health_check(repository: Repository) -> Dict[str, Any]:
        """Health check endpoint with event store connectivity test."""
        try:
            await repository.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise EventStoreUnavailableError("Event store unavailable", e)

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": app.version,
            "event_store": settings.event_store_backend
        }

    @app.get("/ready", tags=["Health"])
    async def ready_check(request: Request) -> Dict[str, Any]:
        """Readiness check endpoint."""
        repository = getattr(request.app.state, "repository", None)
        if repository is None:
            raise ServiceUnavailableError(detail="Service not ready")

        try:
            await repository.ping()
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            raise EventStoreUnavailableError("Service not ready", e)

        return {
            "status": "ready",
            "service": settings.app_name
        }

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": settings.app_name
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": app.version,
            "docs": "/docs",
            "health": "/health",
            "streams": "/streams/all"
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "event_browser.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
