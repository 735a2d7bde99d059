"""
Chart Query Service

Stateless facade behind the /api endpoints. Validates and parses request
parameters, delegates to the candle store, the indicator engine and the
retracement calculator, and turns service errors into HTTP status + body.
"""

import logging
from typing import Optional
from datetime import datetime

from app.core.config import Settings
from app.core.timestamps import QUERY_TIMESTAMP_FORMAT, parse_query_timestamp
from app.schemas.chart import Candle, ErrorResponse, FibLevels, IndicatorPoint, SeriesStatus
from app.services.base import (
    DateParseError,
    LimitExceededError,
    ServiceError,
    StoreUnavailableError,
)
from app.services.cache.redis_client import DerivedCache
from app.services.candles.store import IngestionGuard
from app.services.fibonacci.levels import retracement_levels
from app.services.indicators.interface import IndicatorServiceInterface
from app.services.indicators.service import IndicatorService

logger = logging.getLogger(__name__)

SERVICE_NAME = "ChartQueryService"


def parse_bound(value: Optional[str], param: str) -> Optional[datetime]:
    """Parse a `start`/`end` parameter; blank means unbounded."""
    try:
        return parse_query_timestamp(value)
    except ValueError:
        raise DateParseError(
            SERVICE_NAME,
            f"Invalid {param} {value!r}: expected format YYYY-MM-DD HH:MM:SS",
            {"param": param, "value": value, "format": QUERY_TIMESTAMP_FORMAT},
        )


def describe_error(error: ServiceError) -> tuple[int, dict]:
    """HTTP status and response body for a service error."""
    if error.status_code >= 500:
        logger.error(f"{error.service_name} failed: {error.message}")
    else:
        logger.info(f"Rejected request: {error.message}")

    body = ErrorResponse(error=error.code, message=error.message, details=error.details)
    return error.status_code, body.model_dump()


class ChartQueryService:
    """
    Read operations for the chart.

    Holds no request state; the only shared collaborator is the ingestion
    guard, which hands out the immutable store.
    """

    def __init__(
        self,
        guard: IngestionGuard,
        indicator_service: IndicatorServiceInterface,
        default_limit: int = 500,
        max_limit: Optional[int] = None,
    ):
        self.guard = guard
        self.indicator_service = indicator_service
        self.default_limit = default_limit
        self.max_limit = max_limit

    @property
    def name(self) -> str:
        return SERVICE_NAME

    async def get_candles(self, limit: Optional[int] = None) -> list[Candle]:
        """
        Most recent `limit` candles (default_limit when absent), oldest first.

        Raises:
            LimitExceededError: `limit` is above max_limit.
        """
        if limit is None:
            limit = self.default_limit
            if self.max_limit is not None:
                limit = min(limit, self.max_limit)
        elif self.max_limit is not None and limit > self.max_limit:
            raise LimitExceededError(
                SERVICE_NAME,
                f"limit {limit} is above the maximum of {self.max_limit}",
                {"limit": limit, "max_limit": self.max_limit},
            )

        store = await self.guard.ensure_loaded()
        return await store.scan(limit)

    async def get_indicators(self) -> list[IndicatorPoint]:
        """Indicator points for the full series, aligned one-to-one with candles."""
        store = await self.guard.ensure_loaded()
        return await self.indicator_service.compute_for_store(store)

    async def get_fib(self, start: Optional[str] = None, end: Optional[str] = None) -> FibLevels:
        """Retracement levels over the low/high of candles in [start, end]."""
        start_at = parse_bound(start, "start")
        end_at = parse_bound(end, "end")

        store = await self.guard.ensure_loaded()
        price_range = await store.range_extrema(start_at, end_at)
        return retracement_levels(price_range.low, price_range.high)

    def get_status(self) -> SeriesStatus:
        return self.guard.status()

    async def health_check(self) -> bool:
        """Store is loaded and readable."""
        if not self.guard.is_loaded:
            return False
        try:
            store = await self.guard.ensure_loaded()
            await store.count()
        except StoreUnavailableError:
            return False
        return True


def build_chart_service(settings: Settings, cache: Optional[DerivedCache] = None) -> ChartQueryService:
    """Wire the query service from settings."""
    guard = IngestionGuard(
        sqlite_path=settings.sqlite_path,
        source_path=settings.source_csv_path,
        busy_timeout=settings.sqlite_busy_timeout,
    )
    return ChartQueryService(
        guard=guard,
        indicator_service=IndicatorService(cache),
        default_limit=settings.default_candle_limit,
        max_limit=settings.max_candle_limit,
    )
