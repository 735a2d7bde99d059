"""
Indicator Engine Service Implementation

Calculates SMA-14, EMA-14 and RSI-14 for every candle of the series.
NO LOOK-AHEAD - each point uses only the current and earlier candles.
"""

import asyncio
import logging
from typing import Optional
import numpy as np

from app.schemas.chart import Candle, IndicatorPoint
from app.services.cache.redis_client import DerivedCache
from app.services.candles.store import CandleStore
from app.services.indicators.interface import IndicatorServiceInterface
from app.services.indicators.calculations import (
    DEFAULT_PERIOD,
    sma,
    ema,
    rsi,
    to_optional,
)

logger = logging.getLogger(__name__)


def compute_indicator_points(
    candles: list[Candle], period: int = DEFAULT_PERIOD
) -> list[IndicatorPoint]:
    """Single pass per indicator over the closes; one point per candle."""
    closes = np.array([c.close for c in candles], dtype=float)

    sma_values = to_optional(sma(closes, period))
    ema_values = to_optional(ema(closes, period))
    rsi_values = to_optional(rsi(closes, period))

    return [
        IndicatorPoint(
            timestamp=candle.timestamp,
            sma_14=sma_values[i],
            ema_14=ema_values[i],
            rsi_14=rsi_values[i],
        )
        for i, candle in enumerate(candles)
    ]


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Computes indicators over the full series; results for a given load are
    cached since the stored series never changes.
    """

    def __init__(self, cache: Optional[DerivedCache] = None):
        self._cache = cache or DerivedCache()

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: list[Candle]) -> list[IndicatorPoint]:
        """Calculate indicator points for a candle series."""
        return await asyncio.to_thread(compute_indicator_points, input_data)

    async def compute_for_store(self, store: CandleStore) -> list[IndicatorPoint]:
        """Indicator points for the stored series, computed once per load."""
        key = self._cache.key("indicators", store.load_id)

        cached = await self._cache.get_json(key)
        if cached is not None:
            return [IndicatorPoint.model_validate(p) for p in cached]

        candles = await store.load_all()
        points = await self.execute(candles)
        await self._cache.set_json(key, [p.model_dump(mode="json") for p in points])
        logger.info(
            f"Computed indicators for {len(points)} candles "
            f"(load {store.load_id}, cache: {self._cache.backend})"
        )
        return points

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True
