"""Unit tests for the exception resolver."""

import json
from unittest.mock import patch

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse

from problem_details_demo.server.errors import ProblemResponseError
from problem_details_demo.server.exception_handlers.advice import (
    ExceptionAdvice,
    ExceptionAdviceRegistry,
    exception_handler,
)
from problem_details_demo.server.exception_handlers.rendering import ErrorRenderer
from problem_details_demo.server.exception_handlers.resolver import ExceptionResolver
from problem_details_demo.server.schemas import ProblemDetail

pytestmark = pytest.mark.asyncio


class DecliningAdvice(ExceptionAdvice):
    @exception_handler(Exception)
    def decline(self, exc, request):
        return None


class TeapotAdvice(ExceptionAdvice):
    @exception_handler(ValueError)
    def teapot(self, exc, request):
        return ProblemDetail.for_status_and_detail(418, str(exc))


class PlainAdvice(ExceptionAdvice):
    @exception_handler(ValueError)
    def plain(self, exc, request):
        return PlainTextResponse("plain", status_code=299)


class FailingAdvice(ExceptionAdvice):
    @exception_handler(ValueError)
    def fail(self, exc, request):
        raise RuntimeError("handler broke")


class ProblemAdvice(ExceptionAdvice):
    @exception_handler(ProblemResponseError)
    def problem(self, exc, request):
        return exc.body


def build_resolver(*advices, problem_details_enabled=True):
    registry = ExceptionAdviceRegistry()
    for advice in advices:
        registry.register(advice)
    return ExceptionResolver(registry, ErrorRenderer(problem_details_enabled=problem_details_enabled))


async def test_first_advice_in_order_wins(make_request):
    resolver = build_resolver(PlainAdvice(order=10), TeapotAdvice(order=1))

    response = await resolver.resolve(make_request(), ValueError("short and stout"))

    assert response.status_code == 418
    assert json.loads(response.body)["detail"] == "short and stout"


async def test_none_result_falls_through_to_next_advice(make_request):
    resolver = build_resolver(DecliningAdvice(order=1), PlainAdvice(order=2))

    response = await resolver.resolve(make_request(), ValueError())

    assert response.status_code == 299
    assert response.body == b"plain"


async def test_unhandled_exception_renders_default_500(make_request):
    resolver = build_resolver(DecliningAdvice())

    with patch("problem_details_demo.server.exception_handlers.resolver.logger") as mock_logger:
        response = await resolver.resolve(make_request("/boom"), KeyError("k"))

    assert response.status_code == 500
    mock_logger.error.assert_called_once()
    extra = mock_logger.error.call_args[1]["extra"]
    assert extra["error_type"] == "KeyError"
    assert extra["path"] == "/boom"
    assert extra["client"] == "127.0.0.1"


async def test_unhandled_problem_response_keeps_status(make_request):
    resolver = build_resolver()

    with patch("problem_details_demo.server.exception_handlers.resolver.logger") as mock_logger:
        response = await resolver.resolve(make_request(), ProblemResponseError(409, "conflict"))

    assert response.status_code == 409
    assert json.loads(response.body)["detail"] == "conflict"
    mock_logger.error.assert_not_called()


async def test_unhandled_validation_error_is_a_400(make_request):
    resolver = build_resolver(problem_details_enabled=False)
    exc = RequestValidationError([{"loc": ("query", "limit"), "msg": "bad", "type": "int_parsing"}])

    with patch("problem_details_demo.server.exception_handlers.resolver.logger") as mock_logger:
        response = await resolver.resolve(make_request("/items"), exc)

    assert response.status_code == 400
    assert json.loads(response.body)["error"] == "Bad Request"
    mock_logger.error.assert_not_called()


async def test_failing_handler_falls_back_to_500(make_request):
    resolver = build_resolver(FailingAdvice(), TeapotAdvice())

    with patch("problem_details_demo.server.exception_handlers.resolver.logger") as mock_logger:
        response = await resolver.resolve(make_request(), ValueError())

    assert response.status_code == 500
    mock_logger.warning.assert_called_once()
    assert "Failure in FailingAdvice" in mock_logger.warning.call_args[0][0]


async def test_starlette_http_exception_is_translated(make_request):
    resolver = build_resolver(ProblemAdvice())

    response = await resolver.resolve(
        make_request("/", method="DELETE"),
        StarletteHTTPException(405, headers={"Allow": "GET"}),
    )

    assert response.status_code == 405
    assert response.headers["allow"] == "GET"
    assert json.loads(response.body)["detail"] == "Method 'DELETE' is not supported."


async def test_headers_dropped_when_handler_changes_status(make_request):
    class OverrideAdvice(ExceptionAdvice):
        @exception_handler(ProblemResponseError)
        def override(self, exc, request):
            return ProblemDetail.for_status(500)

    resolver = build_resolver(OverrideAdvice())

    response = await resolver.resolve(make_request(), ProblemResponseError(405, headers={"Allow": "GET"}))

    assert response.status_code == 500
    assert "allow" not in response.headers


async def test_unsupported_handler_result_raises_type_error(make_request):
    class OddAdvice(ExceptionAdvice):
        @exception_handler(ValueError)
        def odd(self, exc, request):
            return "not a response"

    resolver = build_resolver(OddAdvice())

    with pytest.raises(TypeError, match="unsupported type str"):
        await resolver.resolve(make_request(), ValueError())
