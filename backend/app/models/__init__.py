"""
Models Package for the Video Link Resolver.

This package provides the Pydantic models shared by the resolver layers:

Models Overview:
    - ContentItem: Canonical resolved post (video URL or image gallery)
    - ContentReference: Platform content id plus kind
    - StrategyOutcome / StrategyFailure: Per-strategy attempt results
    - ResolutionReport: Final orchestrator state
    - ResolveResponse: HTTP envelope for the resolve endpoint

Example Usage:
    ```python
    from app.models import ContentItem, ContentType

    item = ContentItem(title="t", images=["a.jpg"], type=ContentType.IMAGE)
    assert item.is_valid()
    ```
"""

from app.models.content import (
    DEFAULT_TITLE,
    ContentItem,
    ContentKind,
    ContentReference,
    ContentType,
    OutcomeStatus,
    Platform,
    ResolutionReport,
    ResolutionState,
    ResolveResponse,
    StrategyFailure,
    StrategyOutcome,
)


__all__ = [
    "DEFAULT_TITLE",
    "ContentItem",
    "ContentKind",
    "ContentReference",
    "ContentType",
    "OutcomeStatus",
    "Platform",
    "ResolutionReport",
    "ResolutionState",
    "ResolveResponse",
    "StrategyFailure",
    "StrategyOutcome",
]
