"""
Main Application Entry Point.

This module builds the FastAPI application: middleware (request logging,
CORS), API routers, exception handling and static resources. ``create_app``
is the factory; ``app`` is an instance built from the environment.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from problem_details_demo import __version__
from problem_details_demo.core.logging_config import get_logger
from problem_details_demo.core.monitoring import initialize_logfire

from .api.v1 import examples, health
from .core import constant
from .core.config import Settings, settings as default_settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware
from .routing import AdvisedRoute
from .static_resources import mount_static_resources

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Handles startup and shutdown events for the FastAPI application.
    """
    app_settings: Settings = app.state.settings
    logger.info(
        f"Starting up {constant.PROJECT_NAME}: problem_details={app_settings.problemdetails_enabled}, "
        f"static_path_pattern={app_settings.static_path_pattern}"
    )
    initialize_logfire(app)

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME}...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to build from; the environment-bound settings by default

    Returns:
        The configured application
    """
    settings = settings or default_settings

    app = FastAPI(
        title=constant.PROJECT_NAME,
        description="""
        Problem Details Demo API

        Reports every error as an RFC 7807 problem detail for JSON clients
        and as the whitelabel error page for browsers.
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.router.route_class = AdvisedRoute
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )
    app.add_middleware(RequestLoggingMiddleware, slow_request_threshold_ms=settings.slow_request_threshold_ms)

    setup_exception_handlers(app, settings)

    app.include_router(health.router, tags=["health"])
    if settings.example_endpoints_enabled:
        app.include_router(examples.router, tags=["examples"])

    # Mounted last: a root pattern must not shadow the API routes.
    mount_static_resources(app, settings.static_resources)
    return app


app = create_app()
