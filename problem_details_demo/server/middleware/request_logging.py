"""
Request Logging Middleware for FastAPI.

Times every request and reports it through ``core.monitoring``. Responses
with an error status are also logged with the representation the error was
rendered in (problem details, error attributes or the whitelabel page), so the
logs show which clients received which error format.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from problem_details_demo.core.logging_config import get_logger
from problem_details_demo.core.monitoring import log_api_request

from ..core.constant import HTML_MEDIA_TYPE, JSON_MEDIA_TYPE, PROBLEM_JSON_MEDIA_TYPE

logger = get_logger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time"


def error_format(content_type: str) -> str:
    """Name of the error representation a response's content type stands for."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == PROBLEM_JSON_MEDIA_TYPE:
        return "problem"
    if media_type == JSON_MEDIA_TYPE:
        return "attributes"
    if media_type == HTML_MEDIA_TYPE:
        return "whitelabel"
    return media_type or "empty"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware timing requests and reporting error responses by format."""

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.start_time = started = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            self._report_failure(request, exc, (time.time() - started) * 1000)
            raise

        duration_ms = (time.time() - started) * 1000
        content_type = response.headers.get("content-type", "")
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.3f}"
        log_api_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            content_type=content_type or None,
        )

        if response.status_code >= 400:
            self._report_error_response(request, response.status_code, content_type)
        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                f"Slow API request: {request.method} {request.url.path} took {duration_ms:.2f}ms",
                extra={"path": request.url.path, "duration_ms": duration_ms, "status_code": response.status_code},
            )
        return response

    def _report_error_response(self, request: Request, status_code: int, content_type: str) -> None:
        rendered_as = error_format(content_type)
        level = logger.warning if status_code >= 500 else logger.debug
        level(
            f"{request.method} {request.url.path} answered {status_code} as {rendered_as}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "error_format": rendered_as,
            },
        )

    def _report_failure(self, request: Request, exc: Exception, duration_ms: float) -> None:
        # Only reached for errors raised outside every route and handler.
        logger.error(
            f"API request failed: {request.method} {request.url.path}",
            exc_info=exc,
            extra={"method": request.method, "path": request.url.path, "duration_ms": duration_ms, "error": str(exc)},
        )
        log_api_request(method=request.method, path=request.url.path, status_code=500, duration_ms=duration_ms)
