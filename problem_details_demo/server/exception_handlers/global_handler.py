"""
Global Exception Handling for the FastAPI Application.

This module wires the exception advices into the application:

- ``CatchAllExceptionAdvice`` turns any exception into a 500 problem.
- ``advised_exception_handler`` routes router-level, static-resource and
  error-response exceptions through the application's ``ExceptionResolver``.
- ``global_exception_handler`` is the last resort for exceptions raised
  outside routes (middleware), logging full context before responding.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from problem_details_demo.core.logging_config import get_logger

from ..core.config import Settings
from ..core.constant import LOWEST_PRECEDENCE
from ..errors import ProblemResponseError
from ..schemas import ProblemDetail
from .advice import ExceptionAdvice, ExceptionAdviceRegistry, exception_handler
from .problem_handler import ProblemDetailsExceptionHandler
from .rendering import ErrorRenderer
from .resolver import ExceptionResolver

logger = get_logger(__name__)

CATCH_ALL_DETAIL = "Unexpected internal exception"
CATCH_ALL_PROPERTY = "from-catch-all"


class CatchAllExceptionAdvice(ExceptionAdvice):
    """Lowest precedence advice converting any exception into a 500 problem."""

    order = LOWEST_PRECEDENCE

    @exception_handler(Exception)
    def convert_to_problem(self, exc: Exception, request: Request) -> ProblemDetail:
        error_id = id(exc)
        logger.error(
            f"Unexpected exception [{error_id}] in {request.method} {request.url.path}: {exc}",
            exc_info=exc,
            extra={
                "error_id": error_id,
                "method": request.method,
                "path": request.url.path,
                "error_type": type(exc).__name__,
            },
        )
        problem = ProblemDetail.for_status_and_detail(500, CATCH_ALL_DETAIL)
        problem.set_property(CATCH_ALL_PROPERTY, True)
        return problem


async def advised_exception_handler(request: Request, exc: Exception) -> Response:
    """Hand an exception caught by Starlette's exception middleware to the resolver."""
    resolver: ExceptionResolver = request.app.state.exception_resolver
    return await resolver.resolve(request, exc)


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """
    Global exception handler for errors that escaped every route.

    Logs the full error context with an error ID clients can quote when
    reporting issues, then renders the default 500 error response.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        The default error response for status 500
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
    )

    renderer: ErrorRenderer = request.app.state.error_renderer
    return renderer.render_error(request, 500, exc)


def build_exception_resolver(settings: Settings) -> ExceptionResolver:
    """Create the resolver and register the advices enabled in settings."""
    problem_details = settings.problem_details
    error_rendering = settings.error_rendering

    registry = ExceptionAdviceRegistry()
    if problem_details.catch_all_advice_enabled:
        registry.register(CatchAllExceptionAdvice())
    if problem_details.enabled:
        registry.register(ProblemDetailsExceptionHandler(), order=problem_details.handler_order)

    renderer = ErrorRenderer(
        problem_details_enabled=problem_details.enabled,
        include_message=error_rendering.include_message,
        include_exception=error_rendering.include_exception,
    )
    return ExceptionResolver(registry, renderer)


def setup_exception_handlers(app: FastAPI, settings: Settings) -> ExceptionResolver:
    """
    Register exception handling with the FastAPI application.

    Stores the resolver on ``app.state`` (advised routes look it up there)
    and installs Starlette-level handlers for the exceptions that never reach
    a route handler.

    Args:
        app: The FastAPI application instance
        settings: Application settings selecting the advices to install

    Returns:
        The resolver, so callers can register additional advices
    """
    resolver = build_exception_resolver(settings)
    app.state.exception_resolver = resolver
    app.state.error_renderer = resolver.renderer

    app.add_exception_handler(StarletteHTTPException, advised_exception_handler)
    app.add_exception_handler(ProblemResponseError, advised_exception_handler)
    app.add_exception_handler(RequestValidationError, advised_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug(f"Exception handlers registered successfully: advices={resolver.registry.ordered()}")
    return resolver
