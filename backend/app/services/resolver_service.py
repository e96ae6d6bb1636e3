"""
Video Resolver Service Module

Orchestrates resolution of one piece of user input:

1. Extract the canonical URL from free-form share text
2. Detect the platform from the URL host
3. Run the enabled strategies sequentially, in priority order, until one
   produces a valid content item

The first success wins and later strategies are never invoked; results are
never merged across strategies. Misses and errors are folded into an
immutable tuple of StrategyFailure records, and strategies that report
not_applicable are skipped without a record.

Input errors (no URL, unsupported platform) are raised before any strategy
runs, so they never cause network traffic.
"""

import logging

import httpx

from app.config import Settings, get_settings
from app.models.content import (
    ContentItem,
    OutcomeStatus,
    Platform,
    ResolutionReport,
    ResolutionState,
    StrategyFailure,
    StrategyOutcome,
)
from app.services.strategies import ResolutionStrategy, build_default_strategies
from app.utils.link_parser import extract_url, require_supported_platform
from app.utils.logger import add_log_context


# Configure module logger
logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE: str = "解析失败，请检查链接是否正确或稍后重试"


class ResolverServiceError(Exception):
    """Base exception for resolver service errors."""


class ResolutionExhaustedError(ResolverServiceError):
    """Raised when every applicable strategy missed or errored."""

    def __init__(self, url: str, failures: tuple[StrategyFailure, ...]) -> None:
        self.url = url
        self.failures = failures
        summary = " | ".join(str(failure) for failure in failures) or "no applicable strategy"
        super().__init__(f"All strategies failed for {url}: {summary}")


class VideoResolverService:
    """
    Sequential strategy orchestrator.

    The service is request-scoped: it borrows the caller's HTTP client and
    holds no state between calls.

    Example:
        >>> async with build_http_client() as client:
        ...     service = VideoResolverService(client)
        ...     item = await service.resolve("看看这个 https://v.douyin.com/abc123/ 超搞笑")
        >>> item.platform
        '抖音'
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        strategies: list[ResolutionStrategy] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client
        self.strategies = (
            strategies if strategies is not None else build_default_strategies(client, self.settings)
        )

    async def _attempt(
        self, strategy: ResolutionStrategy, url: str, platform: Platform
    ) -> StrategyOutcome:
        try:
            return await strategy.attempt(url, platform)
        except Exception as e:
            # Any failure inside a strategy is recorded and the chain continues
            logger.exception(f"Strategy {strategy.name} raised unexpectedly")
            return StrategyOutcome.error(f"{type(e).__name__}: {e}")

    async def run(self, raw_input: str | None) -> ResolutionReport:
        """
        Resolve ``raw_input`` and report the final orchestrator state.

        Args:
            raw_input: Free-form user input containing a share link

        Returns:
            ResolutionReport in state SUCCEEDED or EXHAUSTED_FAILED

        Raises:
            NoUrlFoundError: If the input has no http(s) URL
            UnsupportedPlatformError: If the URL host is not supported
        """
        url = extract_url(raw_input)
        platform = require_supported_platform(url)

        ctx_logger = add_log_context(logger, platform=platform.value)
        ctx_logger.info(f"Resolving {url}")

        failures: tuple[StrategyFailure, ...] = ()
        attempted: tuple[str, ...] = ()

        for strategy in self.strategies:
            if not strategy.is_applicable(platform):
                continue

            strategy_logger = add_log_context(ctx_logger, strategy=strategy.name)
            strategy_logger.debug("Attempting strategy")
            attempted = (*attempted, strategy.name)

            outcome = await self._attempt(strategy, url, platform)

            if outcome.succeeded:
                strategy_logger.info("Strategy succeeded")
                return ResolutionReport(
                    state=ResolutionState.SUCCEEDED,
                    url=url,
                    platform=platform,
                    item=outcome.item,
                    strategy=strategy.name,
                    failures=failures,
                    attempted=attempted,
                )

            if outcome.status is OutcomeStatus.NOT_APPLICABLE:
                strategy_logger.debug(f"Strategy not applicable: {outcome.detail}")
                continue

            detail = outcome.detail or outcome.status.value
            strategy_logger.info(f"Strategy {outcome.status.value}: {detail}")
            failures = (
                *failures,
                StrategyFailure(strategy=strategy.name, status=outcome.status, detail=detail),
            )

        ctx_logger.warning(f"All strategies failed for {url}: {len(failures)} failure(s)")
        return ResolutionReport(
            state=ResolutionState.EXHAUSTED_FAILED,
            url=url,
            platform=platform,
            failures=failures,
            attempted=attempted,
        )

    async def resolve(self, raw_input: str | None) -> ContentItem:
        """
        Resolve ``raw_input`` to a content item.

        Raises:
            NoUrlFoundError: If the input has no http(s) URL
            UnsupportedPlatformError: If the URL host is not supported
            ResolutionExhaustedError: If no strategy produced a valid item
        """
        report = await self.run(raw_input)
        if report.state is ResolutionState.SUCCEEDED and report.item is not None:
            return report.item

        for failure in report.failures:
            logger.info(f"Resolution failure detail - {failure}")
        raise ResolutionExhaustedError(report.url, report.failures)


__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "ResolutionExhaustedError",
    "ResolverServiceError",
    "VideoResolverService",
]
