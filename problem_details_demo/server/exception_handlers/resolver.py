"""
Exception Resolver.

Single entry point turning any exception raised while serving a request into
a response. It asks the registered advices in order and falls back to the
default error rendering when none of them handles the exception.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from problem_details_demo.core.logging_config import get_logger
from problem_details_demo.core.monitoring import log_error

from ..errors import ProblemResponseError, translate_http_exception
from ..schemas import ProblemDetail
from .advice import ExceptionAdviceRegistry, ExceptionHandlerResult
from .rendering import ErrorRenderer

logger = get_logger(__name__)


def _fallback_status(exc: BaseException) -> int:
    """Status of the default error response when no advice handled ``exc``."""
    if isinstance(exc, ProblemResponseError):
        return exc.status_code
    if isinstance(exc, RequestValidationError):
        return 400
    return 500


class ExceptionResolver:
    """Resolves exceptions through the advice registry, then the default error rendering."""

    def __init__(self, registry: ExceptionAdviceRegistry, renderer: ErrorRenderer):
        self.registry = registry
        self.renderer = renderer

    async def resolve(self, request: Request, exc: BaseException) -> Response:
        if isinstance(exc, StarletteHTTPException):
            exc = translate_http_exception(request, exc)

        for advice in self.registry.ordered():
            if advice.find_handler(type(exc)) is None:
                continue
            try:
                result = await advice.handle(exc, request)
            except Exception as handler_exc:
                logger.warning(
                    f"Failure in {advice!r} while handling {type(exc).__name__} "
                    f"for {request.method} {request.url.path}",
                    exc_info=True,
                )
                return self._unresolved(request, handler_exc, 500)
            if result is None:
                continue
            logger.debug(f"Resolved [{type(exc).__name__}: {exc}] via {advice!r}")
            return self._to_response(request, exc, result)

        return self._unresolved(request, exc, _fallback_status(exc))

    def _to_response(self, request: Request, exc: BaseException, result: ExceptionHandlerResult) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, ProblemDetail):
            headers = None
            if isinstance(exc, ProblemResponseError) and exc.status_code == result.status:
                headers = exc.headers
            return self.renderer.render_problem(request, result, headers)
        raise TypeError(f"Exception handler returned unsupported type {type(result).__name__}")

    def _unresolved(self, request: Request, exc: BaseException, status: int) -> Response:
        if status >= 500:
            error_id = id(exc)
            logger.error(
                f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
                exc_info=exc,
                extra={
                    "error_id": error_id,
                    "method": request.method,
                    "path": request.url.path,
                    "client": request.client.host if request.client else "unknown",
                    "error_type": type(exc).__name__,
                },
            )
            log_error(type(exc).__name__, str(exc), {"path": request.url.path, "error_id": error_id})
        else:
            logger.debug(f"Resolved [{type(exc).__name__}: {exc}] with default error response {status}")
        return self.renderer.render_error(request, status, exc)
