"""
Field candidate resolution for loosely-shaped provider JSON.

Provider payloads move fields around between releases, so every logical field
is described by an ordered list of candidate paths. A path is a tuple of dict
keys and list indices; the first candidate that yields a non-empty value wins.
"""

from typing import Any


# A path into nested JSON: string keys for objects, integer indices for arrays
FieldPath = tuple[str | int, ...]

# Values above this are treated as milliseconds
MILLISECOND_DURATION_THRESHOLD: int = 10000

IMAGE_ENTRY_KEYS: tuple[str, ...] = ("url", "image", "img")


def get_path(data: Any, path: FieldPath) -> Any:
    """
    Walk ``path`` through nested dicts and lists.

    Returns None as soon as a step does not exist.
    """
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict) or step not in current:
                return None
            current = current[step]
    return current


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def first_value(data: Any, candidates: list[FieldPath]) -> Any:
    """Return the first non-empty value among ``candidates``, or None."""
    for path in candidates:
        value = get_path(data, path)
        if not _is_empty(value):
            return value
    return None


def first_str(data: Any, candidates: list[FieldPath]) -> str | None:
    """
    Return the first non-blank string among ``candidates``.

    Numbers are accepted and stringified so ids such as ``short_id`` work.
    """
    for path in candidates:
        value = get_path(data, path)
        if isinstance(value, bool):
            continue
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, (int, float)):
            return str(value)
    return None


def coerce_int(value: Any) -> int | None:
    """Coerce an int, float or numeric string to a non-negative int."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(float(text))
        except ValueError:
            return None
    else:
        return None
    return number if number >= 0 else None


def first_int(data: Any, candidates: list[FieldPath]) -> int | None:
    """Return the first candidate that coerces to an int."""
    for path in candidates:
        number = coerce_int(get_path(data, path))
        if number is not None:
            return number
    return None


def normalize_duration_seconds(value: Any) -> int | None:
    """
    Normalize a duration to whole seconds.

    Providers disagree on units; values above 10000 are milliseconds.

    Example:
        >>> normalize_duration_seconds(15300)
        15
        >>> normalize_duration_seconds("42")
        42
    """
    number = coerce_int(value)
    if number is None:
        return None
    if number > MILLISECOND_DURATION_THRESHOLD:
        return number // 1000
    return number


def parse_image_entry(entry: Any) -> str | None:
    """Extract a URL from a gallery entry (plain string or object)."""
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, dict):
        for key in IMAGE_ENTRY_KEYS:
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        url_list = entry.get("url_list")
        if isinstance(url_list, list) and url_list:
            first = url_list[0]
            if isinstance(first, str) and first.strip():
                return first.strip()
    return None


def parse_image_urls(data: Any, candidates: list[FieldPath]) -> list[str]:
    """
    Return the URLs of the first non-empty image list among ``candidates``.

    Entries that carry no usable URL are dropped.
    """
    for path in candidates:
        value = get_path(data, path)
        if not isinstance(value, list) or not value:
            continue
        urls = [url for url in (parse_image_entry(entry) for entry in value) if url]
        if urls:
            return urls
    return []


__all__ = [
    "FieldPath",
    "coerce_int",
    "first_int",
    "first_str",
    "first_value",
    "get_path",
    "normalize_duration_seconds",
    "parse_image_entry",
    "parse_image_urls",
]
