"""
Share Link Parsing Utilities for the Video Link Resolver

This module turns free-form user input into something the resolver can act on:
- extract_url: pull the first absolute http(s) URL out of pasted share text
- detect_platform: classify a URL by host into a supported platform
- resolve_reference: derive a content id and kind from a resolved URL or page body
- build_referer: derive a Referer/Origin pair from a media URL's own host

All functions are pure and perform no network access.
"""

import logging
import re

from urllib.parse import urlparse

from app.models.content import ContentKind, ContentReference, Platform


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# A URL is a run of printable ASCII; it stops at whitespace, quotes, angle
# brackets and any non-ASCII character, so CJK text glued to a link is dropped.
URL_PATTERN = re.compile(r"https?://(?:(?![\"'<>`])[!-~])+", re.IGNORECASE)

# Characters trimmed from the end of a URL found inside prose
TRAILING_PUNCTUATION: str = ".,;:!?)]}'\""

# Host suffix table; a host matches when it equals or is a subdomain of a domain.
PLATFORM_DOMAINS: tuple[tuple[Platform, tuple[str, ...]], ...] = (
    (Platform.DOUYIN, ("douyin.com", "iesdouyin.com")),
    (Platform.KUAISHOU, ("kuaishou.com", "chenzhongtech.com")),
    (Platform.XIAOHONGSHU, ("xiaohongshu.com", "xhslink.com")),
    (Platform.TIKTOK, ("tiktok.com",)),
)

# Ordered id patterns; path segments win over query parameters.
REFERENCE_PATTERNS: tuple[tuple[re.Pattern[str], ContentKind], ...] = (
    (re.compile(r"/video/(\d+)"), ContentKind.VIDEO),
    (re.compile(r"/note/(\d+)"), ContentKind.NOTE),
    (re.compile(r"/slides/(\d+)"), ContentKind.SLIDES),
    (re.compile(r"[?&]modal_id=(\d+)"), ContentKind.VIDEO),
    (re.compile(r"[?&]aweme_id=(\d+)"), ContentKind.VIDEO),
)

FALLBACK_REFERER: str = "https://www.douyin.com/"

NO_URL_MESSAGE: str = "未找到有效的链接"
UNSUPPORTED_PLATFORM_MESSAGE: str = "不支持的平台，目前仅支持抖音、快手、小红书、TikTok"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LinkParseError(ValueError):
    """Base error for input that cannot be turned into a resolvable link."""

    user_message: str = NO_URL_MESSAGE

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail or self.user_message


class NoUrlFoundError(LinkParseError):
    """Input text contains no absolute http(s) URL."""

    user_message = NO_URL_MESSAGE


class UnsupportedPlatformError(LinkParseError):
    """URL host does not belong to a supported platform."""

    user_message = UNSUPPORTED_PLATFORM_MESSAGE


# =============================================================================
# URL EXTRACTION
# =============================================================================


def is_absolute_http_url(value: str) -> bool:
    """Return True when ``value`` parses as an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def extract_url(text: str | None) -> str:
    """
    Extract the first absolute http(s) URL from free-form text.

    A bare URL is returned unchanged. Otherwise the first URL-looking run in
    the text is returned with trailing ASCII punctuation removed.

    Args:
        text: Raw user input such as a pasted share message

    Returns:
        The canonical URL string

    Raises:
        NoUrlFoundError: If the text contains no usable URL

    Example:
        >>> extract_url("看看这个 https://v.douyin.com/abc123/ 超搞笑")
        'https://v.douyin.com/abc123/'
    """
    if not text or not text.strip():
        raise NoUrlFoundError("Input is empty")

    candidate = text.strip()
    is_bare = candidate.isascii() and not any(ch.isspace() for ch in candidate)
    if is_bare and is_absolute_http_url(candidate):
        return candidate

    match = URL_PATTERN.search(candidate)
    if not match:
        raise NoUrlFoundError(f"No http(s) URL in input: {candidate[:80]!r}")

    url = match.group(0).rstrip(TRAILING_PUNCTUATION)
    if not is_absolute_http_url(url):
        raise NoUrlFoundError(f"Malformed URL in input: {url[:80]!r}")

    return url


# =============================================================================
# PLATFORM DETECTION
# =============================================================================


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def detect_platform(url: str) -> Platform:
    """
    Classify a URL by its host.

    Args:
        url: Canonical URL

    Returns:
        The matching Platform, or Platform.UNKNOWN

    Example:
        >>> detect_platform("https://v.douyin.com/abc123/")
        <Platform.DOUYIN: 'douyin'>
    """
    if not url:
        return Platform.UNKNOWN

    try:
        host = (urlparse(url.strip()).hostname or "").lower()
    except ValueError:
        return Platform.UNKNOWN

    for platform, domains in PLATFORM_DOMAINS:
        if any(_host_matches(host, domain) for domain in domains):
            return platform

    return Platform.UNKNOWN


def require_supported_platform(url: str) -> Platform:
    """Detect the platform and raise UnsupportedPlatformError for Unknown."""
    platform = detect_platform(url)
    if not platform.is_supported:
        raise UnsupportedPlatformError(f"Unsupported platform for URL: {url[:100]}")
    return platform


# =============================================================================
# CONTENT REFERENCE
# =============================================================================


def _match_reference(text: str) -> ContentReference | None:
    for pattern, kind in REFERENCE_PATTERNS:
        match = pattern.search(text)
        if match:
            return ContentReference(id=match.group(1), kind=kind)
    return None


def resolve_reference(url: str | None, html: str | None = None) -> ContentReference | None:
    """
    Derive a content reference from a resolved URL, then from a page body.

    Args:
        url: Final (post-redirect) URL, may be None
        html: Page body to search when the URL carries no id

    Returns:
        ContentReference, or None when neither source identifies a post
    """
    if url:
        reference = _match_reference(url)
        if reference:
            return reference

    if html:
        reference = _match_reference(html)
        if reference:
            logger.debug(f"Content reference found in page body: {reference.id}")
            return reference

    return None


# =============================================================================
# ANTI-HOTLINK HEADERS
# =============================================================================


def build_referer(url: str) -> str:
    """
    Build a Referer from a media URL's own scheme and host.

    Falls back to the Douyin web origin when the URL has no host.

    Example:
        >>> build_referer("https://v26.douyinvod.com/abc/video.mp4?x=1")
        'https://v26.douyinvod.com/'
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return FALLBACK_REFERER
    if parsed.scheme and parsed.hostname:
        netloc = parsed.netloc.rsplit("@", 1)[-1]
        return f"{parsed.scheme}://{netloc}/"
    return FALLBACK_REFERER


__all__ = [
    "LinkParseError",
    "NoUrlFoundError",
    "UnsupportedPlatformError",
    "NO_URL_MESSAGE",
    "UNSUPPORTED_PLATFORM_MESSAGE",
    "build_referer",
    "detect_platform",
    "extract_url",
    "is_absolute_http_url",
    "require_supported_platform",
    "resolve_reference",
]
