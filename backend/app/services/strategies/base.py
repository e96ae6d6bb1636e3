"""
Resolution strategy interface.

A strategy is one independent way of turning a canonical URL into a content
item. Strategies never raise to the orchestrator for expected conditions; they
report a StrategyOutcome instead. StrategyError is raised internally for
upstream and parse failures and converted to an error outcome at the strategy
boundary.
"""

import logging

from abc import ABC, abstractmethod

import httpx

from app.config import Settings, get_settings
from app.models.content import Platform, StrategyOutcome


class StrategyError(Exception):
    """Upstream or parse failure inside a strategy."""


class ResolutionStrategy(ABC):
    """
    Base class for all resolution strategies.

    Subclasses set ``name`` and implement ``resolve``. ``attempt`` wraps
    ``resolve`` so that StrategyError and httpx transport errors become error
    outcomes.
    """

    name: str = ""
    platforms: frozenset[Platform] = frozenset()

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def is_applicable(self, platform: Platform) -> bool:
        """Return True when the strategy can run for ``platform``."""
        return not self.platforms or platform in self.platforms

    async def attempt(self, url: str, platform: Platform) -> StrategyOutcome:
        """
        Run the strategy once.

        Args:
            url: Canonical URL
            platform: Detected platform

        Returns:
            StrategyOutcome; never raises for upstream or parse failures
        """
        if not self.is_applicable(platform):
            return StrategyOutcome.not_applicable(f"{self.name} does not handle {platform.value}")

        try:
            return await self.resolve(url, platform)
        except StrategyError as e:
            return StrategyOutcome.error(str(e))
        except httpx.TimeoutException:
            return StrategyOutcome.error("timeout")
        except httpx.HTTPError as e:
            return StrategyOutcome.error(f"{type(e).__name__}: {e}")

    @abstractmethod
    async def resolve(self, url: str, platform: Platform) -> StrategyOutcome:
        """Strategy-specific resolution."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


__all__ = ["ResolutionStrategy", "StrategyError"]
