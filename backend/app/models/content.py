"""
Content Pydantic models for the Video Link Resolver.

This module defines the canonical content item every resolution strategy
converges to, the platform and content-kind enumerations, and the value
objects the orchestrator uses to track strategy outcomes.

All models are request-scoped values; nothing here is persisted.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# CONSTANTS
# =============================================================================

# Title used when a provider returns neither a title nor a description
DEFAULT_TITLE: str = "无标题"


# =============================================================================
# ENUMS
# =============================================================================


class Platform(str, Enum):
    """
    Supported short-video platforms.

    Each member carries a display label (``label``) which is what the
    canonical content item exposes to clients.
    """

    DOUYIN = "douyin"
    KUAISHOU = "kuaishou"
    XIAOHONGSHU = "xiaohongshu"
    TIKTOK = "tiktok"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Human-readable platform name shown to users."""
        return _PLATFORM_LABELS[self]

    @property
    def is_supported(self) -> bool:
        return self is not Platform.UNKNOWN


_PLATFORM_LABELS: dict[Platform, str] = {
    Platform.DOUYIN: "抖音",
    Platform.KUAISHOU: "快手",
    Platform.XIAOHONGSHU: "小红书",
    Platform.TIKTOK: "TikTok",
    Platform.UNKNOWN: "未知",
}


class ContentKind(str, Enum):
    """Kind of post a content reference points at."""

    VIDEO = "video"
    NOTE = "note"
    SLIDES = "slides"


class ContentType(str, Enum):
    """Media shape of a resolved content item."""

    VIDEO = "video"
    IMAGE = "image"


class OutcomeStatus(str, Enum):
    """
    Classification of a single strategy attempt.

    - SUCCESS: the strategy produced a valid content item
    - MISS: the strategy ran but had no usable data (not an error)
    - ERROR: a network or parse failure occurred inside the strategy
    - NOT_APPLICABLE: the strategy cannot run for this input and is skipped
    """

    SUCCESS = "success"
    MISS = "miss"
    ERROR = "error"
    NOT_APPLICABLE = "not_applicable"


class ResolutionState(str, Enum):
    """Orchestrator lifecycle: NOT_STARTED → TRYING_STRATEGY → SUCCEEDED | EXHAUSTED_FAILED."""

    NOT_STARTED = "not_started"
    TRYING_STRATEGY = "trying_strategy"
    SUCCEEDED = "succeeded"
    EXHAUSTED_FAILED = "exhausted_failed"


# =============================================================================
# MODELS
# =============================================================================


class ContentReference(BaseModel):
    """Platform-specific identifier of a post, derived from a resolved URL or page body."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Numeric content identifier")
    kind: ContentKind = Field(default=ContentKind.VIDEO, description="Content kind")


class ContentItem(BaseModel):
    """
    Canonical, platform-agnostic description of a resolved post.

    Serialized with camelCase aliases (``videoUrl``, ``musicUrl``) for the
    HTTP envelope. A video item carries ``video_url``; an image gallery
    carries a non-empty ``images`` list.

    Example:
        ```python
        item = ContentItem(
            title="t",
            cover="https://p3.example.com/cover.jpg",
            video_url="https://v3.example.com/play/abc",
            author="someone",
            platform="抖音",
            type=ContentType.VIDEO,
        )
        assert item.is_valid()
        ```
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default=DEFAULT_TITLE, description="Post caption or title")
    cover: str = Field(default="", description="Cover image URL")
    video_url: str | None = Field(
        default=None, alias="videoUrl", description="Directly playable video URL"
    )
    images: list[str] | None = Field(default=None, description="Gallery image URLs")
    author: str = Field(default="", description="Author display name")
    platform: str = Field(default=Platform.UNKNOWN.label, description="Platform display label")
    duration: int | None = Field(default=None, ge=0, description="Duration in seconds")
    likes: int | None = Field(default=None, ge=0, description="Like count")
    comments: int | None = Field(default=None, ge=0, description="Comment count")
    music_url: str | None = Field(
        default=None, alias="musicUrl", description="Background music URL"
    )
    type: ContentType = Field(default=ContentType.VIDEO, description="video or image")

    def is_valid(self) -> bool:
        """
        Check that the item carries playable media.

        A video item needs a non-blank ``video_url``; an image item needs at
        least one image. Exactly one of the two may be populated, so an item
        with neither or both is invalid whatever its ``type`` says. The check
        has no side effects, so it can be repeated.
        """
        has_video = bool(self.video_url and self.video_url.strip())
        has_images = bool(self.images)
        if has_video == has_images:
            return False
        if self.type is ContentType.IMAGE:
            return has_images
        return has_video

    def to_response(self) -> dict:
        """Serialize for the HTTP envelope (camelCase, empty optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StrategyOutcome(BaseModel):
    """Result of one strategy attempt."""

    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    item: ContentItem | None = None
    detail: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS and self.item is not None

    @classmethod
    def success(cls, item: ContentItem) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.SUCCESS, item=item)

    @classmethod
    def miss(cls, detail: str) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.MISS, detail=detail)

    @classmethod
    def error(cls, detail: str) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.ERROR, detail=detail)

    @classmethod
    def not_applicable(cls, detail: str) -> "StrategyOutcome":
        return cls(status=OutcomeStatus.NOT_APPLICABLE, detail=detail)


class StrategyFailure(BaseModel):
    """Record of a strategy that missed or errored."""

    model_config = ConfigDict(frozen=True)

    strategy: str
    status: OutcomeStatus
    detail: str

    def __str__(self) -> str:
        return f"{self.strategy}: {self.detail}"


class ResolutionReport(BaseModel):
    """
    Final orchestrator state for one resolution.

    Attributes:
        state: SUCCEEDED or EXHAUSTED_FAILED once resolution ends
        url: Canonical URL the strategies were run against
        platform: Detected platform
        item: Winning content item when state is SUCCEEDED
        strategy: Name of the winning strategy
        failures: Misses and errors collected in attempt order
        attempted: Names of strategies that were actually invoked
    """

    model_config = ConfigDict(frozen=True)

    state: ResolutionState
    url: str
    platform: Platform
    item: ContentItem | None = None
    strategy: str | None = None
    failures: tuple[StrategyFailure, ...] = ()
    attempted: tuple[str, ...] = ()


class ResolveResponse(BaseModel):
    """HTTP envelope for the resolve endpoint."""

    success: bool = Field(..., description="Whether resolution succeeded")
    data: ContentItem | None = Field(default=None, description="Resolved content item")
    error: str | None = Field(default=None, description="Human-readable failure message")

    def to_response(self) -> dict:
        body: dict = {"success": self.success}
        if self.data is not None:
            body["data"] = self.data.to_response()
        if self.error is not None:
            body["error"] = self.error
        return body
