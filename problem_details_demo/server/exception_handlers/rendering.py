"""
Error Rendering.

Turns problem details and unhandled errors into HTTP responses, negotiating
the representation from the request's ``Accept`` header:

- JSON clients get ``application/problem+json`` (or plain error attributes as
  ``application/json`` when problem details are disabled).
- Clients preferring ``text/html`` get the whitelabel error page.
"""

import html
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Tuple

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.responses import Response

from ..core.constant import HTML_MEDIA_TYPE, JSON_MEDIA_TYPE, PROBLEM_JSON_MEDIA_TYPE
from ..errors import ProblemResponseError
from ..schemas import ErrorAttributes, ProblemDetail, reason_phrase

HTML_FORMAT = "html"
JSON_FORMAT = "json"

WHITELABEL_PAGE = (
    "<html><body><h1>Whitelabel Error Page</h1>"
    "<p>This application has no explicit mapping for this error, so you are seeing this as a fallback.</p>"
    "<div id='created'>{timestamp}</div>"
    "<div>There was an unexpected error (type={error}, status={status}).</div>"
    "{message}"
    "</body></html>"
)


def _parse_accept(accept: str) -> List[Tuple[str, str, float]]:
    ranges = []
    for part in accept.split(","):
        media, *params = [piece.strip() for piece in part.split(";")]
        if not media:
            continue
        quality = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        main, _, sub = media.lower().partition("/")
        ranges.append((main, sub or "*", quality))
    return ranges


def _quality(media_type: str, ranges: List[Tuple[str, str, float]]) -> float:
    """Quality of ``media_type`` under the most specific matching range (0 when none match)."""
    main, sub = media_type.split("/")
    best_specificity = -1
    quality = 0.0
    for range_main, range_sub, range_quality in ranges:
        if range_main == main and range_sub == sub:
            specificity = 2
        elif range_main == main and range_sub == "*":
            specificity = 1
        elif range_main == "*":
            specificity = 0
        else:
            continue
        if specificity > best_specificity:
            best_specificity, quality = specificity, range_quality
    return quality


def preferred_error_format(accept: Optional[str]) -> str:
    """
    Pick ``"html"`` or ``"json"`` for an error response.

    HTML is only chosen when the client rates it strictly higher than JSON;
    a missing or unsatisfiable header means JSON.
    """
    if not accept:
        return JSON_FORMAT
    ranges = _parse_accept(accept)
    json_quality = max(_quality(PROBLEM_JSON_MEDIA_TYPE, ranges), _quality(JSON_MEDIA_TYPE, ranges))
    html_quality = _quality(HTML_MEDIA_TYPE, ranges)
    return HTML_FORMAT if html_quality > json_quality else JSON_FORMAT


class ErrorRenderer:
    """Renders error responses according to the configured error options."""

    def __init__(
        self,
        problem_details_enabled: bool = False,
        include_message: bool = False,
        include_exception: bool = False,
    ):
        self.problem_details_enabled = problem_details_enabled
        self.include_message = include_message
        self.include_exception = include_exception

    def render_problem(
        self,
        request: Request,
        problem: ProblemDetail,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """Render a problem detail, filling ``instance`` with the request path when unset."""
        if preferred_error_format(request.headers.get("accept")) == HTML_FORMAT:
            return self.whitelabel_page(problem.status, problem.detail, headers)

        body = problem.model_copy(deep=True)
        if body.instance is None:
            body.instance = request.url.path
        return JSONResponse(
            content=body.to_dict(),
            status_code=body.status,
            headers=dict(headers) if headers else None,
            media_type=PROBLEM_JSON_MEDIA_TYPE,
        )

    def render_error(self, request: Request, status: int, exc: Optional[BaseException] = None) -> Response:
        """Render the default error response for an exception no advice handled."""
        headers = exc.headers if isinstance(exc, ProblemResponseError) and exc.status_code == status else None
        message = self._message(status, exc)

        if preferred_error_format(request.headers.get("accept")) == HTML_FORMAT:
            return self.whitelabel_page(status, message, headers)

        if self.problem_details_enabled:
            if isinstance(exc, ProblemResponseError) and exc.status_code == status:
                problem = exc.body
            else:
                problem = ProblemDetail.for_status_and_detail(status, message)
            return self.render_problem(request, problem, headers)

        attributes = ErrorAttributes(
            status=status,
            error=reason_phrase(status),
            path=request.url.path,
            message=message,
            exception=self._exception_name(exc),
        )
        return JSONResponse(
            content=attributes.to_dict(),
            status_code=status,
            headers=dict(headers) if headers else None,
            media_type=JSON_MEDIA_TYPE,
        )

    def whitelabel_page(
        self,
        status: int,
        message: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HTMLResponse:
        message_html = ""
        if self.include_message and message:
            message_html = f"<div>{html.escape(message)}</div>"
        page = WHITELABEL_PAGE.format(
            timestamp=html.escape(datetime.now(timezone.utc).strftime("%a %b %d %H:%M:%S %Z %Y")),
            error=html.escape(reason_phrase(status) or "Unknown"),
            status=status,
            message=message_html,
        )
        return HTMLResponse(content=page, status_code=status, headers=dict(headers) if headers else None)

    def _message(self, status: int, exc: Optional[BaseException]) -> Optional[str]:
        if not self.include_message or exc is None:
            return None
        if isinstance(exc, ProblemResponseError) and exc.status_code == status:
            return exc.body.detail
        return str(exc) or None

    def _exception_name(self, exc: Optional[BaseException]) -> Optional[str]:
        if not self.include_exception or exc is None:
            return None
        return f"{type(exc).__module__}.{type(exc).__qualname__}"
