"""
Douyin first-party resolution strategies.

douyin_share_page:
    Fetches the mobile share page, reads the state object the page embeds in
    ``window._ROUTER_DATA`` and normalizes the post it contains. When the
    entry page carries no post, canonical share-page templates built from the
    content reference are tried in order.

douyin_item_api:
    Follows the share link's redirects to learn the content id, then asks the
    public item-info endpoint for the post.

Both strategies share normalize_douyin_item, which maps Douyin's aweme JSON
onto the canonical ContentItem.
"""

import json

from typing import Any

import httpx

from bs4 import BeautifulSoup

from app.core.http_client import HTML_ACCEPT, JSON_ACCEPT
from app.models.content import (
    DEFAULT_TITLE,
    ContentItem,
    ContentKind,
    ContentReference,
    ContentType,
    Platform,
    StrategyOutcome,
)
from app.services.strategies.base import ResolutionStrategy, StrategyError
from app.utils.field_paths import (
    FieldPath,
    first_int,
    first_str,
    get_path,
    normalize_duration_seconds,
    parse_image_urls,
)
from app.utils.link_parser import resolve_reference
from app.utils.watermark import to_no_watermark_url


# =============================================================================
# CONSTANTS
# =============================================================================

ROUTER_DATA_MARKER: str = "window._ROUTER_DATA ="

DOUYIN_ITEM_API_URL: str = "https://www.iesdouyin.com/web/api/v2/aweme/iteminfo/"

ACCEPT_LANGUAGE: str = "zh-CN,zh;q=0.9,en;q=0.8"

# Candidate paths for each logical field of an aweme item, best first
IMAGE_PATHS: list[FieldPath] = [("images",), ("image_infos",), ("images_list",)]

VIDEO_PATHS: list[FieldPath] = [
    ("video", "bit_rate", 0, "play_addr", "url_list", 0),
    ("video", "play_addr", "url_list", 0),
    ("video", "download_addr", "url_list", 0),
]

COVER_PATHS: list[FieldPath] = [
    ("video", "cover", "url_list", 0),
    ("video", "origin_cover", "url_list", 0),
    ("video", "dynamic_cover", "url_list", 0),
]

TITLE_PATHS: list[FieldPath] = [("desc",), ("title",)]

AUTHOR_PATHS: list[FieldPath] = [
    ("author", "nickname"),
    ("author", "unique_id"),
    ("author", "short_id"),
]

MUSIC_PATHS: list[FieldPath] = [
    ("music", "play_url", "url_list", 0),
    ("music", "play_url", "uri"),
]


# =============================================================================
# PAGE PARSING
# =============================================================================


def extract_router_data(html: str) -> str | None:
    """
    Return the JSON literal assigned to ``window._ROUTER_DATA``.

    The literal runs from the first ``{`` after the marker to the end of the
    script element, with a trailing semicolon removed.
    """
    if not html or ROUTER_DATA_MARKER not in html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script"):
        text = script.string or script.get_text()
        if not text or ROUTER_DATA_MARKER not in text:
            continue
        after_marker = text.split(ROUTER_DATA_MARKER, 1)[1]
        start = after_marker.find("{")
        if start < 0:
            continue
        json_text = after_marker[start:].strip().rstrip(";").strip()
        if json_text:
            return json_text

    return None


def _looks_like_item(node: dict) -> bool:
    if "aweme_id" in node:
        return True
    return "desc" in node and ("video" in node or "images" in node)


def _search_item(node: Any) -> dict | None:
    # Depth-first, in document order
    if isinstance(node, dict):
        if _looks_like_item(node):
            return node
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = _search_item(child)
        if found is not None:
            return found
    return None


def find_item(router_data: Any) -> dict | None:
    """
    Locate the post object inside the router state.

    Checks ``loaderData.*.videoInfoRes.item_list[0]`` first, then falls back
    to a depth-first search for the first item-shaped object.
    """
    loader_data = router_data.get("loaderData") if isinstance(router_data, dict) else None
    if isinstance(loader_data, dict):
        for page_data in loader_data.values():
            item = get_path(page_data, ("videoInfoRes", "item_list", 0))
            if isinstance(item, dict):
                return item

    return _search_item(router_data)


def normalize_douyin_item(item: dict, platform: Platform = Platform.DOUYIN) -> ContentItem:
    """
    Map a Douyin aweme object onto a ContentItem.

    A non-empty image list makes the item a gallery; otherwise the best play
    URL is rewritten to its watermark-free form. The returned item may be
    invalid; callers check ``is_valid()``.
    """
    images = parse_image_urls(item, IMAGE_PATHS)
    is_gallery = bool(images)

    video_url = None
    if not is_gallery:
        raw_video_url = first_str(item, VIDEO_PATHS)
        video_url = to_no_watermark_url(raw_video_url) if raw_video_url else None

    cover = first_str(item, COVER_PATHS) or (images[0] if images else "")

    return ContentItem(
        title=first_str(item, TITLE_PATHS) or DEFAULT_TITLE,
        cover=cover,
        video_url=video_url,
        images=images or None,
        author=first_str(item, AUTHOR_PATHS) or "",
        platform=platform.label,
        duration=normalize_duration_seconds(get_path(item, ("video", "duration"))),
        likes=first_int(item, [("statistics", "digg_count")]),
        comments=first_int(item, [("statistics", "comment_count")]),
        music_url=first_str(item, MUSIC_PATHS),
        type=ContentType.IMAGE if is_gallery else ContentType.VIDEO,
    )


def parse_share_html(html: str, platform: Platform = Platform.DOUYIN) -> ContentItem | None:
    """
    Parse a share page into a ContentItem.

    Returns:
        ContentItem (possibly invalid), or None when the page has no router
        state or no post inside it

    Raises:
        StrategyError: If the embedded router state is not valid JSON
    """
    json_text = extract_router_data(html)
    if json_text is None:
        return None

    try:
        router_data = json.loads(json_text)
    except ValueError as e:
        raise StrategyError(f"malformed _ROUTER_DATA: {e}") from e

    item = find_item(router_data)
    if item is None:
        return None

    return normalize_douyin_item(item, platform)


# =============================================================================
# STRATEGIES
# =============================================================================


class DouyinSharePageStrategy(ResolutionStrategy):
    """Scrape the Douyin mobile share page and its canonical templates."""

    name = "douyin_share_page"
    platforms = frozenset({Platform.DOUYIN})

    def candidate_urls(self, reference: ContentReference) -> list[str]:
        """Share-page URLs to try for ``reference``, reference kind first, deduplicated."""
        base = self.settings.share_page_base_url.rstrip("/")
        kinds = [reference.kind, ContentKind.VIDEO, ContentKind.NOTE, ContentKind.SLIDES]
        urls: list[str] = []
        for kind in kinds:
            url = f"{base}/{kind.value}/{reference.id}/"
            if url not in urls:
                urls.append(url)
        return urls

    async def fetch_page(self, url: str) -> tuple[str, str]:
        """
        Fetch a share page following redirects.

        Returns:
            Tuple of (body, final URL)

        Raises:
            StrategyError: On a non-2xx response
        """
        response = await self.client.get(
            url,
            headers={
                "User-Agent": self.settings.mobile_user_agent,
                "Accept": HTML_ACCEPT,
                "Accept-Language": ACCEPT_LANGUAGE,
                "Referer": self.settings.douyin_referer,
            },
        )
        if not response.is_success:
            raise StrategyError(f"HTTP {response.status_code}")
        return response.text, str(response.url)

    def _parse_page(
        self, html: str, platform: Platform, label: str, details: list[str]
    ) -> ContentItem | None:
        try:
            item = parse_share_html(html, platform)
        except StrategyError as e:
            details.append(f"{label}: {e}")
            return None

        if item is None:
            details.append(f"{label}: no _ROUTER_DATA item")
            return None
        if not item.is_valid():
            details.append(f"{label}: incomplete item")
            return None
        return item

    async def resolve(self, url: str, platform: Platform) -> StrategyOutcome:
        details: list[str] = []

        html, final_url = await self.fetch_page(url)
        item = self._parse_page(html, platform, "entry page", details)
        if item is not None:
            return StrategyOutcome.success(item)

        reference = (
            resolve_reference(final_url) or resolve_reference(url) or resolve_reference(None, html)
        )
        if reference is None:
            self.logger.debug(f"No content reference after entry page: {'; '.join(details)}")
            return StrategyOutcome.not_applicable(f"no content reference in {final_url}")

        for candidate in self.candidate_urls(reference):
            try:
                html, _ = await self.fetch_page(candidate)
            except (StrategyError, httpx.HTTPError) as e:
                details.append(f"{candidate}: {str(e) or type(e).__name__}")
                continue

            item = self._parse_page(html, platform, candidate, details)
            if item is not None:
                return StrategyOutcome.success(item)

        return StrategyOutcome.miss("; ".join(details))


class DouyinItemApiStrategy(ResolutionStrategy):
    """Resolve through Douyin's public item-info endpoint."""

    name = "douyin_item_api"
    platforms = frozenset({Platform.DOUYIN})

    async def resolve(self, url: str, platform: Platform) -> StrategyOutcome:
        landing = await self.client.get(
            url, headers={"User-Agent": self.settings.mobile_user_agent}
        )
        final_url = str(landing.url)

        reference = resolve_reference(final_url) or resolve_reference(url)
        if reference is None:
            return StrategyOutcome.not_applicable(f"no content id in {final_url}")

        response = await self.client.get(
            DOUYIN_ITEM_API_URL,
            params={"item_ids": reference.id},
            headers={
                "User-Agent": self.settings.mobile_user_agent,
                "Accept": JSON_ACCEPT,
                "Referer": self.settings.douyin_referer,
            },
        )
        if not response.is_success:
            return StrategyOutcome.miss(f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise StrategyError(f"invalid JSON from item API: {e}") from e

        item_list = payload.get("item_list") if isinstance(payload, dict) else None
        if not isinstance(item_list, list) or not item_list or not isinstance(item_list[0], dict):
            return StrategyOutcome.miss("empty item_list")

        item = normalize_douyin_item(item_list[0], platform)
        if not item.is_valid():
            return StrategyOutcome.miss("incomplete item")
        return StrategyOutcome.success(item)


__all__ = [
    "DOUYIN_ITEM_API_URL",
    "DouyinItemApiStrategy",
    "DouyinSharePageStrategy",
    "extract_router_data",
    "find_item",
    "normalize_douyin_item",
    "parse_share_html",
]
