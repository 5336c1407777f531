"""
Error-response exceptions.

Exceptions in this module carry their own HTTP status and problem detail
body, so any handler (or the default error rendering) can turn them into a
response without knowing where they were raised.
"""

from typing import Iterable, Mapping, Optional

from fastapi import Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from .schemas import ProblemDetail, reason_phrase


class ProblemResponseError(Exception):
    """Exception carrying an HTTP status and a problem detail body."""

    def __init__(
        self,
        status_code: int,
        detail: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = ProblemDetail.for_status_and_detail(status_code, detail)
        super().__init__(detail or reason_phrase(status_code) or str(status_code))
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, detail={self.body.detail!r})"


class NoHandlerFoundError(ProblemResponseError):
    """No route matches the request path."""

    def __init__(self, method: str, path: str):
        self.method = method.upper()
        self.path = path
        super().__init__(404, f"No endpoint {self.method} {path}.")


class NoResourceFoundError(ProblemResponseError):
    """The static resource handler has no file for the request path."""

    def __init__(self, resource_path: str):
        self.resource_path = resource_path
        super().__init__(404, f"No static resource {resource_path}.")


class MethodNotAllowedError(ProblemResponseError):
    """The path exists but does not support the request method."""

    def __init__(self, method: str, allowed: Optional[Iterable[str]] = None):
        self.method = method.upper()
        self.allowed = sorted({m.upper() for m in allowed or ()})
        headers = {"Allow": ", ".join(self.allowed)} if self.allowed else None
        super().__init__(405, f"Method '{self.method}' is not supported.", headers=headers)


def _allowed_methods(exc: StarletteHTTPException) -> list[str]:
    for name, value in (exc.headers or {}).items():
        if name.lower() == "allow":
            return [m.strip() for m in value.split(",") if m.strip()]
    return []


def translate_http_exception(request: Request, exc: StarletteHTTPException) -> ProblemResponseError:
    """
    Map a Starlette ``HTTPException`` onto the error-response exceptions.

    The router raises bare 404 and 405 exceptions (detail left at the reason
    phrase); those become ``NoHandlerFoundError`` and ``MethodNotAllowedError``,
    the latter keeping the ``Allow`` header. Anything else keeps its status,
    headers and custom detail.
    """
    detail = exc.detail if isinstance(exc.detail, str) else None
    if detail == reason_phrase(exc.status_code):
        detail = None

    if detail is None and exc.status_code == 404:
        return NoHandlerFoundError(request.method, request.url.path)
    if detail is None and exc.status_code == 405:
        return MethodNotAllowedError(request.method, _allowed_methods(exc))
    return ProblemResponseError(exc.status_code, detail, headers=exc.headers, cause=exc)
