from typing import Callable, Optional

import pytest
from starlette.requests import Request


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a real Starlette request for handler and renderer tests."""

    def _make(path: str = "/api/test", method: str = "GET", accept: Optional[str] = None) -> Request:
        headers = [(b"accept", accept.encode("latin-1"))] if accept else []
        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 50000),
            "root_path": "",
            "path": path,
            "raw_path": path.encode(),
            "query_string": b"",
            "headers": headers,
        }
        return Request(scope)

    return _make
