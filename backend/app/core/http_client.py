"""
Outbound HTTP client construction for the Video Link Resolver.

Every inbound request gets its own ``httpx.AsyncClient`` built from settings:
mobile User-Agent, bounded timeout and a capped redirect chain. Clients are
never shared across requests. The factory is exposed as a FastAPI dependency
so tests can substitute clients backed by ``httpx.MockTransport``.
"""

from collections.abc import Callable

import httpx

from app.config import Settings, get_settings


# Signature of the dependency-injected client builder
HttpClientFactory = Callable[[], httpx.AsyncClient]

JSON_ACCEPT: str = "application/json, text/plain, */*"
HTML_ACCEPT: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def default_headers(settings: Settings) -> dict[str, str]:
    """Headers shared by provider API calls."""
    return {
        "User-Agent": settings.mobile_user_agent,
        "Accept": JSON_ACCEPT,
    }


def build_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build a request-scoped AsyncClient.

    Args:
        settings: Application settings (defaults to get_settings())
        transport: Optional transport override, used by tests

    Returns:
        httpx.AsyncClient that the caller must close
    """
    settings = settings or get_settings()
    return httpx.AsyncClient(
        headers=default_headers(settings),
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        transport=transport,
    )


def get_http_client_factory() -> HttpClientFactory:
    """
    FastAPI dependency returning a zero-argument client builder.

    Routes call the factory once per request and own the resulting client.
    """
    settings = get_settings()
    return lambda: build_http_client(settings)


__all__ = [
    "HTML_ACCEPT",
    "HttpClientFactory",
    "JSON_ACCEPT",
    "build_http_client",
    "default_headers",
    "get_http_client_factory",
]
