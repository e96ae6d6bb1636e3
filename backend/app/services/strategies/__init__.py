"""
Resolution strategies and the registry that orders them.

Strategies are looked up by name so the priority order is a configuration
value (``ENABLED_STRATEGIES``). Unknown names are logged and skipped.
"""

import logging

import httpx

from app.config import Settings, get_settings
from app.services.strategies.base import ResolutionStrategy, StrategyError
from app.services.strategies.providers import (
    PROVIDER_STRATEGIES,
    DouyinHybridStrategy,
    LolimiStrategy,
    PearktrueStrategy,
    ProviderStrategy,
    TikwmStrategy,
    VvhanStrategy,
)
from app.services.strategies.share_page import DouyinItemApiStrategy, DouyinSharePageStrategy


logger = logging.getLogger(__name__)


STRATEGY_REGISTRY: dict[str, type[ResolutionStrategy]] = {
    strategy.name: strategy
    for strategy in (DouyinSharePageStrategy, DouyinItemApiStrategy, *PROVIDER_STRATEGIES)
}


def build_default_strategies(
    client: httpx.AsyncClient, settings: Settings | None = None
) -> list[ResolutionStrategy]:
    """
    Instantiate the enabled strategies in configured priority order.

    Args:
        client: Request-scoped HTTP client shared by all strategies
        settings: Application settings (defaults to get_settings())

    Returns:
        Strategy instances, duplicates and unknown names removed
    """
    settings = settings or get_settings()
    strategies: list[ResolutionStrategy] = []
    seen: set[str] = set()

    for name in settings.enabled_strategies:
        strategy_cls = STRATEGY_REGISTRY.get(name)
        if strategy_cls is None:
            logger.warning(f"Unknown strategy '{name}' in configuration, skipping")
            continue
        if name in seen:
            continue
        seen.add(name)
        strategies.append(strategy_cls(client, settings))

    return strategies


__all__ = [
    "STRATEGY_REGISTRY",
    "DouyinHybridStrategy",
    "DouyinItemApiStrategy",
    "DouyinSharePageStrategy",
    "LolimiStrategy",
    "PearktrueStrategy",
    "ProviderStrategy",
    "ResolutionStrategy",
    "StrategyError",
    "TikwmStrategy",
    "VvhanStrategy",
    "build_default_strategies",
]
