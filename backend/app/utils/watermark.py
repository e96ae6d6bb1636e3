"""
Watermark-free play URL rewrite.

Douyin's CDN serves the watermarked stream under a ``/playwm/`` path segment and
the clean stream under ``/play/``. Some query parameters (``logo_name``,
``watermark``, ``wm``) also request the overlay. This convention is not
documented by the platform, so it is kept here and nowhere else.
"""

import re

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


WATERMARK_QUERY_PARAMS: frozenset[str] = frozenset({"logo_name", "watermark", "wm"})

_PLAYWM_SEGMENT = re.compile(r"/playwm(?=/|$)")


def _unescape(url: str) -> str:
    # JSON embedded in HTML often keeps forward slashes escaped
    return url.replace("\\u002F", "/").replace("\\u002f", "/").replace("\\/", "/")


def to_no_watermark_url(url: str) -> str:
    """
    Rewrite a play URL to its watermark-free form.

    The rewrite is idempotent: applying it to its own output returns the
    output unchanged.

    Example:
        >>> to_no_watermark_url("https://aweme.snssdk.com/aweme/v1/playwm/abc?logo_name=x&wm=1")
        'https://aweme.snssdk.com/aweme/v1/play/abc'
    """
    if not url:
        return url

    cleaned = _unescape(url.strip())

    try:
        parts = urlsplit(cleaned)
    except ValueError:
        parts = None

    if parts is None or not parts.scheme or not parts.netloc:
        return cleaned.replace("/playwm/", "/play/").replace("/playwm", "/play")

    path = _PLAYWM_SEGMENT.sub("/play", parts.path)
    query_pairs = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in WATERMARK_QUERY_PARAMS
    ]
    query = urlencode(query_pairs) if query_pairs else ""

    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


__all__ = ["WATERMARK_QUERY_PARAMS", "to_no_watermark_url"]
