"""
Request pacing for Steam catalog calls.

Steam has no published quota for the store endpoints, so enrichment
uses a fixed pause between consecutive calls instead of a token bucket.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from gamevault.logger import get_logger


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter."""

    delay_seconds: float = 0.5

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")


@dataclass
class RateLimiter:
    """
    Fixed-delay pacer.

    Every ``pause()`` sleeps for the configured delay, so two calls
    separated by a pause are never closer than that delay.

    Example:
        >>> limiter = RateLimiter(RateLimiterConfig(delay_seconds=0.5))
        >>> await limiter.pause()
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    pauses: int = field(init=False, default=0)
    _logger: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = get_logger(__name__, component="rate_limiter")

    async def pause(self) -> None:
        """Sleep for the configured delay."""
        self.pauses += 1
        if self.config.delay_seconds <= 0:
            return
        self._logger.debug("Pausing between requests", wait_seconds=self.config.delay_seconds)
        await asyncio.sleep(self.config.delay_seconds)
