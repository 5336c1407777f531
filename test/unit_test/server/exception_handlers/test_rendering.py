"""Unit tests for error rendering and content negotiation."""

import json

import pytest

from problem_details_demo.server.errors import MethodNotAllowedError, NoHandlerFoundError
from problem_details_demo.server.exception_handlers.rendering import ErrorRenderer, preferred_error_format
from problem_details_demo.server.schemas import ProblemDetail


class TestPreferredErrorFormat:
    """Test Accept header negotiation."""

    @pytest.mark.parametrize(
        ("accept", "expected"),
        [
            (None, "json"),
            ("", "json"),
            ("*/*", "json"),
            ("application/json", "json"),
            ("application/problem+json", "json"),
            ("text/html", "html"),
            ("text/*", "html"),
            ("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8", "html"),
            ("application/json, text/html", "json"),
            ("text/html;q=0.5, application/json;q=0.9", "json"),
            ("text/html;q=0.9, */*;q=0.1", "html"),
            ("text/html;q=0, */*", "json"),
            ("image/png", "json"),
            ("text/html;q=oops", "json"),
        ],
    )
    def test_negotiation(self, accept, expected):
        assert preferred_error_format(accept) == expected


class TestRenderProblem:
    """Test problem detail rendering."""

    def test_json_problem_fills_instance(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)
        problem = ProblemDetail.for_status_and_detail(404, "gone")

        response = renderer.render_problem(make_request("/missing", accept="application/json"), problem)

        assert response.status_code == 404
        assert response.headers["content-type"] == "application/problem+json"
        body = json.loads(response.body)
        assert body["instance"] == "/missing"
        assert body["detail"] == "gone"
        assert problem.instance is None

    def test_explicit_instance_is_kept(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)
        problem = ProblemDetail(status=409, instance="/orders/7")

        response = renderer.render_problem(make_request("/orders"), problem)

        assert json.loads(response.body)["instance"] == "/orders/7"

    def test_headers_are_passed_through(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)

        response = renderer.render_problem(make_request(), ProblemDetail.for_status(405), {"Allow": "GET"})

        assert response.headers["allow"] == "GET"

    def test_html_client_gets_whitelabel_page(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)

        response = renderer.render_problem(make_request(accept="text/html"), ProblemDetail.for_status(404))

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/html")
        page = response.body.decode()
        assert "<h1>Whitelabel Error Page</h1>" in page
        assert "There was an unexpected error (type=Not Found, status=404)." in page


class TestRenderError:
    """Test default error rendering."""

    def test_error_attributes_when_problem_details_disabled(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=False)

        response = renderer.render_error(make_request("/boom"), 500, RuntimeError("secret"))

        assert response.headers["content-type"] == "application/json"
        body = json.loads(response.body)
        assert body["status"] == 500
        assert body["error"] == "Internal Server Error"
        assert body["path"] == "/boom"
        assert "message" not in body

    def test_problem_when_enabled_hides_message(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)

        response = renderer.render_error(make_request("/boom"), 500, RuntimeError("secret"))

        body = json.loads(response.body)
        assert response.headers["content-type"] == "application/problem+json"
        assert body == {"type": "about:blank", "title": "Internal Server Error", "status": 500, "instance": "/boom"}

    def test_problem_response_error_body_is_reused(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=True)
        exc = NoHandlerFoundError("GET", "/x")

        response = renderer.render_error(make_request("/x"), 404, exc)

        assert json.loads(response.body)["detail"] == "No endpoint GET /x."

    def test_headers_only_kept_for_matching_status(self, make_request):
        renderer = ErrorRenderer(problem_details_enabled=False)
        exc = MethodNotAllowedError("DELETE", ["GET"])

        matching = renderer.render_error(make_request(), 405, exc)
        other = renderer.render_error(make_request(), 500, exc)

        assert matching.headers["allow"] == "GET"
        assert "allow" not in other.headers

    def test_message_is_escaped_in_whitelabel_page(self, make_request):
        renderer = ErrorRenderer(include_message=True)

        response = renderer.render_error(make_request(accept="text/html"), 500, RuntimeError("<script>"))

        page = response.body.decode()
        assert "&lt;script&gt;" in page
        assert "<script>" not in page

    def test_exception_name_included_when_enabled(self, make_request):
        renderer = ErrorRenderer(include_exception=True)

        response = renderer.render_error(make_request(), 500, KeyError("k"))

        assert json.loads(response.body)["exception"] == "builtins.KeyError"
