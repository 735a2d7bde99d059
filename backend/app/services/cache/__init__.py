"""
Cache module for the chart backend.

Provides Redis caching for data derived from the candle series.
"""

from app.services.cache.redis_client import (
    DerivedCache,
    init_redis,
    close_redis,
)

__all__ = [
    "DerivedCache",
    "init_redis",
    "close_redis",
]
