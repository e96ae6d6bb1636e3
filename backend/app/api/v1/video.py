"""
Video Link Resolver API Router Module.

Endpoints:
    - GET /resolve: Resolve share text to a canonical content item
    - GET /proxy: Stream a media URL through the server with anti-hotlink headers
    - GET /download: Same as /proxy, served as a file attachment
    - OPTIONS /proxy, /download: CORS preflight for media players

Every failure is returned as the JSON envelope ``{"success": false, "error"}``
with a user-facing Chinese message; provider details and stack traces are only
logged.

Example:
    >>> GET /api/v1/video/resolve?url=看看这个%20https://v.douyin.com/abc123/%20超搞笑
    >>> {
    >>>     "success": true,
    >>>     "data": {"title": "...", "videoUrl": "https://...", "type": "video", ...}
    >>> }
"""

import asyncio
import contextlib
import logging
import re

from collections.abc import Coroutine
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from app.config import Settings, get_settings
from app.core.http_client import HttpClientFactory, get_http_client_factory
from app.models.content import ResolveResponse
from app.services.resolver_service import (
    GENERIC_FAILURE_MESSAGE,
    ResolutionExhaustedError,
    VideoResolverService,
)
from app.utils.link_parser import LinkParseError, build_referer, is_absolute_http_url


# Configure module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    tags=["video"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing, malformed or unsupported link"},
        status.HTTP_502_BAD_GATEWAY: {"description": "Every resolution source failed"},
        status.HTTP_504_GATEWAY_TIMEOUT: {"description": "Resolution took too long"},
    },
)


# =============================================================================
# Constants
# =============================================================================

MISSING_URL_MESSAGE: str = "缺少 URL 参数"
INVALID_URL_MESSAGE: str = "无效的视频地址"
TIMEOUT_MESSAGE: str = "解析超时，请稍后重试"
INTERNAL_ERROR_MESSAGE: str = "服务器内部错误，请稍后重试"
PROXY_FAILURE_MESSAGE: str = "视频获取失败，请稍后重试"

DEFAULT_CONTENT_TYPE: str = "video/mp4"
DEFAULT_FILENAME: str = "video.mp4"
MAX_FILENAME_LENGTH: int = 100

# Client closed connection; nginx convention, never seen by the client
CLIENT_CLOSED_REQUEST: int = 499

MIRRORED_HEADERS: tuple[str, ...] = ("content-length", "content-range", "accept-ranges")

CORS_MEDIA_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "Range",
}

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')
_WHITESPACE = re.compile(r"\s+")


class ClientDisconnectedError(Exception):
    """The inbound client went away while a resolution was running."""


class UpstreamMediaError(Exception):
    """The media host refused or failed the proxied request."""


# =============================================================================
# Helpers
# =============================================================================


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ResolveResponse(success=False, error=message).to_response(),
    )


async def run_until_disconnect(
    request: Request,
    coro: Coroutine[Any, Any, T],
    timeout: float,
    poll_interval: float,
) -> T:
    """
    Await ``coro`` while watching the inbound connection.

    The coroutine runs as a task; it is cancelled when the client disconnects
    or when ``timeout`` elapses, which in turn cancels any outbound call it is
    waiting on.

    Raises:
        ClientDisconnectedError: If the client went away first
        TimeoutError: If ``timeout`` elapsed first
    """
    task = asyncio.ensure_future(coro)
    try:
        async with asyncio.timeout(timeout):
            while True:
                done, _ = await asyncio.wait({task}, timeout=poll_interval)
                if task in done:
                    return task.result()
                if await request.is_disconnected():
                    raise ClientDisconnectedError
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


def sanitize_filename(filename: str | None) -> str:
    """
    Make a user-supplied filename safe for Content-Disposition.

    Illegal characters are removed, whitespace runs become underscores and the
    result is capped at 100 characters.

    Example:
        >>> sanitize_filename('my video: "best"?.mp4')
        'my_video_best.mp4'
    """
    if not filename:
        return DEFAULT_FILENAME
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", filename)
    cleaned = _WHITESPACE.sub("_", cleaned.strip())
    cleaned = cleaned[:MAX_FILENAME_LENGTH].strip("._")
    return cleaned or DEFAULT_FILENAME


def content_disposition(filename: str) -> str:
    """Build an attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").strip("._") or DEFAULT_FILENAME
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def build_media_headers(url: str, settings: Settings, range_header: str | None) -> dict[str, str]:
    """Outbound headers for media hosts; Referer/Origin come from the media URL itself."""
    referer = build_referer(url)
    headers = {
        "User-Agent": settings.mobile_user_agent,
        "Referer": referer,
        "Origin": referer.rstrip("/"),
        "Accept": "*/*",
        # Keep upstream bytes and Content-Length in agreement
        "Accept-Encoding": "identity",
    }
    if range_header:
        headers["Range"] = range_header
    return headers


async def _close_upstream(response: httpx.Response, client: httpx.AsyncClient) -> None:
    await response.aclose()
    await client.aclose()


async def open_media_stream(
    url: str,
    request: Request,
    settings: Settings,
    client_factory: HttpClientFactory,
    extra_headers: dict[str, str] | None = None,
) -> StreamingResponse:
    """
    Fetch ``url`` upstream and relay it as a streaming response.

    The upstream response and its client are closed by a background task once
    the body has been sent.

    Raises:
        UpstreamMediaError: If the upstream request fails or returns neither 200 nor 206
    """
    client = client_factory()
    try:
        upstream_request = client.build_request(
            "GET", url, headers=build_media_headers(url, settings, request.headers.get("range"))
        )
        upstream = await client.send(upstream_request, stream=True)
    except httpx.HTTPError as e:
        await client.aclose()
        raise UpstreamMediaError(f"{type(e).__name__}: {e}") from e

    if upstream.status_code not in (status.HTTP_200_OK, status.HTTP_206_PARTIAL_CONTENT):
        await _close_upstream(upstream, client)
        raise UpstreamMediaError(f"HTTP {upstream.status_code}")

    headers = {
        **CORS_MEDIA_HEADERS,
        "Access-Control-Expose-Headers": "Content-Length, Content-Range, Accept-Ranges",
        "Cache-Control": f"public, max-age={settings.proxy_cache_max_age}",
    }
    for name in MIRRORED_HEADERS:
        value = upstream.headers.get(name)
        if value:
            headers[name.title()] = value
    if extra_headers:
        headers.update(extra_headers)

    return StreamingResponse(
        upstream.aiter_raw(),
        status_code=upstream.status_code,
        headers=headers,
        media_type=upstream.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        background=BackgroundTask(_close_upstream, upstream, client),
    )


def _validate_media_url(url: str | None) -> JSONResponse | None:
    if not url or not url.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, MISSING_URL_MESSAGE)
    if not is_absolute_http_url(url.strip()):
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_URL_MESSAGE)
    return None


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/resolve",
    summary="Resolve share link",
    description="Extract the link from share text and resolve it to a playable video or gallery",
)
async def resolve_video(
    request: Request,
    url: str | None = Query(default=None, description="Share text or link"),
    settings: Settings = Depends(get_settings),
    client_factory: HttpClientFactory = Depends(get_http_client_factory),
) -> Response:
    """
    Resolve share text to a canonical content item.

    Status mapping:
        200: resolved, ``{"success": true, "data": ...}``
        400: missing url, no link in text, or unsupported platform
        502: every strategy missed or errored
        504: resolution exceeded RESOLVE_TIMEOUT_SECONDS
        500: unexpected failure
    """
    if not url or not url.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, MISSING_URL_MESSAGE)

    try:
        async with client_factory() as client:
            service = VideoResolverService(client, settings=settings)
            item = await run_until_disconnect(
                request,
                service.resolve(url),
                timeout=settings.resolve_timeout_seconds,
                poll_interval=settings.disconnect_poll_interval_seconds,
            )
    except LinkParseError as e:
        logger.info(f"Rejected input: {e.detail}")
        return error_response(status.HTTP_400_BAD_REQUEST, e.user_message)
    except ResolutionExhaustedError as e:
        logger.warning(f"Resolution exhausted: {e}")
        return error_response(status.HTTP_502_BAD_GATEWAY, GENERIC_FAILURE_MESSAGE)
    except TimeoutError:
        logger.warning(f"Resolution timed out after {settings.resolve_timeout_seconds}s")
        return error_response(status.HTTP_504_GATEWAY_TIMEOUT, TIMEOUT_MESSAGE)
    except ClientDisconnectedError:
        logger.info("Client disconnected, resolution cancelled")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except Exception:
        logger.exception("Unexpected error while resolving link")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    return JSONResponse(content=ResolveResponse(success=True, data=item).to_response())


@router.get(
    "/proxy",
    summary="Proxy media",
    description="Stream a media URL with Referer/Origin derived from its host; forwards Range",
)
async def proxy_video(
    request: Request,
    url: str | None = Query(default=None, description="Media URL"),
    settings: Settings = Depends(get_settings),
    client_factory: HttpClientFactory = Depends(get_http_client_factory),
) -> Response:
    invalid = _validate_media_url(url)
    if invalid is not None:
        return invalid

    try:
        return await open_media_stream(url.strip(), request, settings, client_factory)
    except UpstreamMediaError as e:
        logger.warning(f"Proxy upstream failure for {url[:100]}: {e}")
        return error_response(status.HTTP_502_BAD_GATEWAY, PROXY_FAILURE_MESSAGE)


@router.get(
    "/download",
    summary="Download media",
    description="Same as /proxy but served as an attachment with a sanitized filename",
)
async def download_video(
    request: Request,
    url: str | None = Query(default=None, description="Media URL"),
    filename: str | None = Query(default=None, description="Suggested file name"),
    settings: Settings = Depends(get_settings),
    client_factory: HttpClientFactory = Depends(get_http_client_factory),
) -> Response:
    invalid = _validate_media_url(url)
    if invalid is not None:
        return invalid

    safe_name = sanitize_filename(filename)
    try:
        return await open_media_stream(
            url.strip(),
            request,
            settings,
            client_factory,
            extra_headers={"Content-Disposition": content_disposition(safe_name)},
        )
    except UpstreamMediaError as e:
        logger.warning(f"Download upstream failure for {url[:100]}: {e}")
        return error_response(status.HTTP_502_BAD_GATEWAY, PROXY_FAILURE_MESSAGE)


@router.options("/proxy", include_in_schema=False)
@router.options("/download", include_in_schema=False)
async def media_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_MEDIA_HEADERS)


__all__ = [
    "router",
    "content_disposition",
    "run_until_disconnect",
    "sanitize_filename",
]
