from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Iterable

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from problem_details_demo.server.core.config import Settings
from problem_details_demo.server.main import create_app

TEST_ROOT = Path(__file__).resolve().parent
# Load test/.env first, then fall back to test/.env.example for defaults
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://localhost",
        "http://127.0.0.1",
        "http://testserver",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """Static resource directory holding a single ``hello.txt``."""
    directory = tmp_path / "static"
    directory.mkdir()
    (directory / "hello.txt").write_text("hello")
    return directory


@pytest.fixture
def app_factory(static_dir: Path) -> Callable[..., FastAPI]:
    """Build an application from settings overrides (Settings field names)."""

    def _build(**overrides) -> FastAPI:
        values = {"static_directory": str(static_dir), **overrides}
        return create_app(Settings(**values))

    return _build


@pytest_asyncio.fixture
async def client_for(app_factory) -> AsyncIterator[Callable[..., Awaitable[AsyncClient]]]:
    """Async HTTP client factory bound to a freshly built application."""
    clients: list[AsyncClient] = []

    async def _client(**overrides) -> AsyncClient:
        app = app_factory(**overrides)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost")
        clients.append(client)
        return client

    yield _client

    for client in clients:
        await client.aclose()
