"""Main FastAPI application."""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from routeguard import __version__
from routeguard.api.integration import build_route_registry
from routeguard.api.routes import routes, tokens
from routeguard.config import Settings, get_settings
from routeguard.core.logging import setup_logging
from routeguard.database import create_tables, init_db
from routeguard.telemetry import TelemetryManager

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, routers: Sequence[APIRouter] = ()) -> FastAPI:
    """
    Create the FastAPI application.

    The API token route registry is built from every included route when the
    application starts, so routers added after this call are collected too.

    Args:
        settings: Application settings, read from the environment if omitted
        routers: Resource routers to mount under the API prefix

    Returns:
        Configured application
    """
    if settings is None:
        settings = get_settings()

    telemetry_manager = TelemetryManager(settings)
    telemetry_manager.setup()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info(f"Starting {settings.app_name}")

        init_db(settings)
        if settings.db_create_tables:
            create_tables()
        logger.info("Database initialized")

        # Published in one assignment once complete; requests only read it.
        app.state.route_registry = build_route_registry(app, settings)

        yield

        telemetry_manager.shutdown()
        logger.info(f"Shutting down {settings.app_name}")

    app = FastAPI(
        title=settings.app_name,
        description="Route permissions and authorization for API tokens",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.otel_enabled:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumented with OpenTelemetry")

    app.include_router(routes.router, prefix=settings.api_prefix)
    app.include_router(tokens.router, prefix=settings.api_prefix)
    for router in routers:
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return app


settings = get_settings()
setup_logging(settings)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "routeguard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
