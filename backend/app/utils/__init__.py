"""
Utilities Package for the Video Link Resolver.

Modules:
--------
link_parser:
    Share-text URL extraction, host-based platform detection, content
    reference derivation and Referer construction for media hosts.

field_paths:
    Ordered candidate-path lookups over loosely-shaped provider JSON,
    numeric coercion and duration normalization.

watermark:
    Rewrite of CDN play URLs to their watermark-free form.

logger:
    JSON and text formatters, application logging setup and context adapters.

All helpers here are pure or configuration-only; none performs network I/O.
"""

from app.utils.field_paths import (
    FieldPath,
    coerce_int,
    first_int,
    first_str,
    first_value,
    get_path,
    normalize_duration_seconds,
    parse_image_urls,
)
from app.utils.link_parser import (
    LinkParseError,
    NoUrlFoundError,
    UnsupportedPlatformError,
    build_referer,
    detect_platform,
    extract_url,
    resolve_reference,
)
from app.utils.logger import add_log_context, get_logger, setup_logging
from app.utils.watermark import to_no_watermark_url


__all__ = [
    # Field paths
    "FieldPath",
    "coerce_int",
    "first_int",
    "first_str",
    "first_value",
    "get_path",
    "normalize_duration_seconds",
    "parse_image_urls",
    # Link parsing
    "LinkParseError",
    "NoUrlFoundError",
    "UnsupportedPlatformError",
    "build_referer",
    "detect_platform",
    "extract_url",
    "resolve_reference",
    # Logging
    "add_log_context",
    "get_logger",
    "setup_logging",
    # Watermark
    "to_no_watermark_url",
]
