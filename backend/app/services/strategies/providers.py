"""
Third-party parsing API adapters.

Every provider follows the same shape: GET an endpoint with the canonical URL
as a query parameter, check the provider's success envelope, then map its
``data`` object onto a ContentItem through an explicit field map. The shared
engine lives in ProviderStrategy; each adapter only declares its endpoint,
envelope check and candidate paths.

Outcome rules:
- non-2xx response: miss with ``HTTP <code>``
- transport error, timeout or undecodable JSON: error
- envelope reports failure: miss carrying the provider's code
- mapped item fails validation: miss
"""

from abc import abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.http_client import JSON_ACCEPT
from app.models.content import (
    DEFAULT_TITLE,
    ContentItem,
    ContentType,
    Platform,
    StrategyOutcome,
)
from app.services.strategies.base import ResolutionStrategy, StrategyError
from app.utils.field_paths import (
    FieldPath,
    first_int,
    first_str,
    first_value,
    normalize_duration_seconds,
    parse_image_urls,
)


# =============================================================================
# FIELD MAPS
# =============================================================================


class ProviderFieldMap(BaseModel):
    """
    Ordered candidate paths for each ContentItem field.

    Paths are relative to the provider's ``data`` object; the first non-empty
    candidate wins.
    """

    model_config = ConfigDict(frozen=True)

    title: list[FieldPath] = Field(default_factory=lambda: [("title",), ("desc",)])
    cover: list[FieldPath] = Field(default_factory=lambda: [("cover",)])
    video: list[FieldPath] = Field(default_factory=lambda: [("url",)])
    images: list[FieldPath] = Field(default_factory=lambda: [("images",)])
    author: list[FieldPath] = Field(default_factory=lambda: [("author",)])
    duration: list[FieldPath] = Field(default_factory=lambda: [("duration",)])
    likes: list[FieldPath] = Field(default_factory=lambda: [("digg_count",)])
    comments: list[FieldPath] = Field(default_factory=lambda: [("comment_count",)])
    music: list[FieldPath] = Field(default_factory=lambda: [("music_url",), ("music",)])


def map_provider_data(data: dict, fields: ProviderFieldMap, platform: Platform) -> ContentItem:
    """
    Build a ContentItem from a provider ``data`` object.

    A non-empty image list makes the item a gallery and suppresses the video
    URL. Counts accept numbers or numeric strings.
    """
    images = parse_image_urls(data, fields.images)
    is_gallery = bool(images)

    return ContentItem(
        title=first_str(data, fields.title) or DEFAULT_TITLE,
        cover=first_str(data, fields.cover) or (images[0] if images else ""),
        video_url=None if is_gallery else first_str(data, fields.video),
        images=images or None,
        author=first_str(data, fields.author) or "",
        platform=platform.label,
        duration=normalize_duration_seconds(first_value(data, fields.duration)),
        likes=first_int(data, fields.likes),
        comments=first_int(data, fields.comments),
        music_url=first_str(data, fields.music),
        type=ContentType.IMAGE if is_gallery else ContentType.VIDEO,
    )


def coerce_code(value: Any) -> int | None:
    """Read an envelope code given as an int or a numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


# =============================================================================
# ENGINE
# =============================================================================


class ProviderStrategy(ResolutionStrategy):
    """
    Generic engine shared by all third-party API adapters.

    Subclasses set ``name``, ``endpoint``, ``fields`` and optionally
    ``extra_params``, and implement ``envelope_error``.
    """

    endpoint: str = ""
    extra_params: tuple[tuple[str, str], ...] = ()
    fields: ProviderFieldMap = ProviderFieldMap()

    def build_params(self, url: str) -> dict[str, str]:
        return {"url": url, **dict(self.extra_params)}

    @abstractmethod
    def envelope_error(self, payload: dict) -> str | None:
        """Return a failure detail when the envelope reports failure, else None."""

    def extract_data(self, payload: dict) -> Any:
        return payload.get("data")

    async def resolve(self, url: str, platform: Platform) -> StrategyOutcome:
        response = await self.client.get(
            self.endpoint,
            params=self.build_params(url),
            headers={"User-Agent": self.settings.mobile_user_agent, "Accept": JSON_ACCEPT},
        )
        if not response.is_success:
            return StrategyOutcome.miss(f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise StrategyError(f"invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise StrategyError(f"unexpected payload type {type(payload).__name__}")

        failure = self.envelope_error(payload)
        if failure:
            return StrategyOutcome.miss(failure)

        data = self.extract_data(payload)
        if not isinstance(data, dict):
            return StrategyOutcome.miss("response has no data object")

        item = map_provider_data(data, self.fields, platform)
        if not item.is_valid():
            return StrategyOutcome.miss("incomplete item")

        self.logger.debug(f"{self.name} mapped {item.type.value} item: {item.title[:40]}")
        return StrategyOutcome.success(item)


# =============================================================================
# ADAPTERS
# =============================================================================


class TikwmStrategy(ProviderStrategy):
    name = "tikwm"
    endpoint = "https://www.tikwm.com/api/"
    extra_params = (("hd", "1"),)
    fields = ProviderFieldMap(
        cover=[("cover",), ("origin_cover",)],
        video=[("hdplay",), ("play",), ("wmplay",), ("video", "play_addr", "url_list", 0)],
        author=[("author", "nickname"), ("author", "unique_id"), ("author", "id")],
        music=[("music",), ("music_info", "play")],
    )

    def envelope_error(self, payload: dict) -> str | None:
        code = coerce_code(payload.get("code"))
        if code != 0:
            return f"code={payload.get('code')}"
        return None


class PearktrueStrategy(ProviderStrategy):
    name = "pearktrue"
    endpoint = "https://api.pearktrue.cn/api/video/douyin/"
    fields = ProviderFieldMap(
        cover=[("cover",), ("origin_cover",)],
        video=[("url",), ("video_url",), ("nwm_video_url",)],
        author=[("author",), ("nickname",), ("author_name",)],
    )

    def envelope_error(self, payload: dict) -> str | None:
        if coerce_code(payload.get("code")) != 200:
            return f"code={payload.get('code')}"
        return None


class VvhanStrategy(ProviderStrategy):
    name = "vvhan"
    endpoint = "https://api.vvhan.com/api/video"
    fields = ProviderFieldMap(
        title=[("title",)],
        video=[("url",), ("video_url",)],
    )

    def envelope_error(self, payload: dict) -> str | None:
        if payload.get("success") is not True:
            return f"success={payload.get('success')}"
        return None


class LolimiStrategy(ProviderStrategy):
    name = "lolimi"
    endpoint = "https://api.lolimi.cn/API/dy/"
    fields = ProviderFieldMap(
        video=[("url",), ("video",), ("video_url",)],
        author=[("author",), ("nickname",)],
    )

    def envelope_error(self, payload: dict) -> str | None:
        if coerce_code(payload.get("code")) != 1:
            return f"code={payload.get('code')}"
        return None


class DouyinHybridStrategy(ProviderStrategy):
    """Self-hostable Douyin/TikTok API that returns the raw aweme object."""

    name = "douyin_hybrid"
    endpoint = "https://douyin.wtf/api/hybrid/video_data"
    extra_params = (("minimal", "false"),)
    platforms = frozenset({Platform.DOUYIN, Platform.TIKTOK})
    fields = ProviderFieldMap(
        title=[("desc",), ("title",)],
        cover=[
            ("images", 0, "url_list", 0),
            ("cover", "url_list", 0),
            ("cover",),
            ("video", "cover", "url_list", 0),
        ],
        video=[("video", "play_addr", "url_list", 0), ("video", "download_addr", "url_list", 0)],
        author=[("author", "nickname"), ("author", "unique_id")],
        duration=[("video", "duration"), ("duration",)],
        likes=[("statistics", "digg_count"), ("digg_count",)],
        comments=[("statistics", "comment_count"), ("comment_count",)],
        music=[("music", "play_url", "url_list", 0)],
    )

    def envelope_error(self, payload: dict) -> str | None:
        if payload.get("status") != "success":
            return f"status={payload.get('status')}"
        return None


PROVIDER_STRATEGIES: tuple[type[ProviderStrategy], ...] = (
    TikwmStrategy,
    PearktrueStrategy,
    VvhanStrategy,
    LolimiStrategy,
    DouyinHybridStrategy,
)


__all__ = [
    "PROVIDER_STRATEGIES",
    "DouyinHybridStrategy",
    "LolimiStrategy",
    "PearktrueStrategy",
    "ProviderFieldMap",
    "ProviderStrategy",
    "TikwmStrategy",
    "VvhanStrategy",
    "coerce_code",
    "map_provider_data",
]
