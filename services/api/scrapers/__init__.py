"""
Source clients for report ingestion.

Clients share a minimum-interval rate limiter and capped exponential
backoff from base, and report fetch failures through FetchResult rather
than raising.
"""

from .base import (
    FetchResult,
    MinIntervalRateLimiter,
    SourceRegistry,
    backoff_delay,
)

__all__ = [
    "FetchResult",
    "MinIntervalRateLimiter",
    "SourceRegistry",
    "backoff_delay",
]
