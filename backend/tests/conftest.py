"""
Pytest Configuration and Test Fixtures for the Video Link Resolver Backend

This module provides:
- Test Settings with short timeouts and no .env loading
- A routing helper that backs httpx.AsyncClient with httpx.MockTransport so
  every outbound call is deterministic and recorded
- FastAPI TestClient with the settings and HTTP client factory overridden
- Sample Douyin aweme items and share-page HTML
"""

import json

from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.core.http_client import build_http_client, get_http_client_factory
from app.main import app


# ==============================================================================
# Pytest Configuration
# ==============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used across the suite."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as API-level test")


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment, with short timeouts."""
    return Settings(
        _env_file=None,
        app_env="testing",
        app_name="video-link-resolver-test",
        debug=True,
        request_timeout_seconds=5.0,
        resolve_timeout_seconds=5.0,
        disconnect_poll_interval_seconds=0.05,
    )


# ==============================================================================
# Outbound HTTP Fixtures
# ==============================================================================


Handler = Callable[[httpx.Request], httpx.Response]


class MockUpstream:
    """
    Route table for httpx.MockTransport.

    Routes are matched on ``host + path``; unmatched requests get a 404 so a
    test never reaches the network. Every request is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Handler] = {}
        self.calls: list[httpx.Request] = []

    def add(self, url: str, handler: Handler | httpx.Response) -> None:
        parsed = httpx.URL(url)
        key = f"{parsed.host}{parsed.path}"
        if isinstance(handler, httpx.Response):
            response = handler
            self.routes[key] = lambda request: _clone(response)
        else:
            self.routes[key] = handler

    def add_json(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.add(url, lambda request: httpx.Response(status_code, json=payload))

    def add_redirect(self, url: str, location: str) -> None:
        self.add(url, lambda request: httpx.Response(302, headers={"Location": location}))

    def hosts_called(self) -> list[str]:
        return [request.url.host for request in self.calls]

    def calls_to(self, url: str) -> list[httpx.Request]:
        parsed = httpx.URL(url)
        return [
            request
            for request in self.calls
            if request.url.host == parsed.host and request.url.path == parsed.path
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(f"{request.url.host}{request.url.path}")
        if handler is None:
            return httpx.Response(404, text="no route")
        return handler(request)


def _clone(response: httpx.Response) -> httpx.Response:
    return httpx.Response(
        response.status_code, headers=response.headers, content=response.content
    )


@pytest.fixture
def upstream() -> MockUpstream:
    """Empty route table; tests register the upstream responses they need."""
    return MockUpstream()


@pytest.fixture
def http_client_factory(
    upstream: MockUpstream, test_settings: Settings
) -> Callable[[], httpx.AsyncClient]:
    """Client builder producing AsyncClients backed by ``upstream``."""
    transport = httpx.MockTransport(upstream)
    return lambda: build_http_client(test_settings, transport=transport)


@pytest.fixture
async def http_client(
    http_client_factory: Callable[[], httpx.AsyncClient],
):
    """A single mocked AsyncClient, closed after the test."""
    async with http_client_factory() as client:
        yield client


@pytest.fixture
def api_client(
    test_settings: Settings,
    http_client_factory: Callable[[], httpx.AsyncClient],
) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient with settings and outbound HTTP overridden.

    The lifespan is not entered, so logging configuration is left to pytest.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_client_factory] = lambda: http_client_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==============================================================================
# Sample Douyin Data
# ==============================================================================


@pytest.fixture
def douyin_video_item() -> dict[str, Any]:
    """Aweme object for a video post, shaped like Douyin's share-page state."""
    return {
        "aweme_id": "7300000000000000001",
        "desc": "周末去海边",
        "author": {"nickname": "小明", "unique_id": "xiaoming"},
        "video": {
            "play_addr": {
                "url_list": [
                    "https://aweme.snssdk.com/aweme/v1/playwm/?video_id=v0abc&ratio=720p&line=0&logo_name=aweme"
                ]
            },
            "cover": {"url_list": ["https://p3.douyinpic.com/cover.jpeg"]},
            "duration": 15300,
        },
        "statistics": {"digg_count": 1200, "comment_count": "34"},
        "music": {"play_url": {"url_list": ["https://sf3.douyinvod.com/music.mp3"]}},
    }


@pytest.fixture
def douyin_gallery_item() -> dict[str, Any]:
    """Aweme object for an image post (note)."""
    return {
        "aweme_id": "7300000000000000002",
        "desc": "今日穿搭",
        "author": {"nickname": "小红"},
        "images": [
            {"url_list": ["https://p9.douyinpic.com/img1.webp"]},
            {"url_list": ["https://p9.douyinpic.com/img2.webp"]},
        ],
        "video": {"play_addr": {"url_list": ["https://aweme.snssdk.com/aweme/v1/playwm/music"]}},
    }


@pytest.fixture
def router_html() -> Callable[[dict[str, Any]], str]:
    """Build a share page embedding ``window._ROUTER_DATA`` around an aweme item."""

    def _build(item: dict[str, Any]) -> str:
        router_data = {
            "loaderData": {
                "video_(id)/page": {"videoInfoRes": {"item_list": [item]}},
            }
        }
        return (
            "<html><head><title>抖音</title></head><body>"
            "<script>window.__INIT__ = {};</script>"
            f"<script>window._ROUTER_DATA = {json.dumps(router_data, ensure_ascii=False)};</script>"
            "</body></html>"
        )

    return _build
