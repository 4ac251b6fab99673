"""Ingestion utilities."""

from gamevault.ingestion.utils.rate_limiter import RateLimiter, RateLimiterConfig

__all__ = ["RateLimiter", "RateLimiterConfig"]
