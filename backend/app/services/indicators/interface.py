"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod

from app.services.base import BaseService
from app.schemas.chart import Candle, IndicatorPoint
from app.services.candles.store import CandleStore


class IndicatorServiceInterface(BaseService[list[Candle], list[IndicatorPoint]]):
    """
    Indicator Engine Service Contract.

    INPUT: list[Candle]
        - Full series in ascending timestamp order

    OUTPUT: list[IndicatorPoint]
        - One point per candle, same order and timestamps
        - sma_14 / rsi_14 are None during warm-up (first 13 candles)
        - ema_14 is present for every candle
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: list[Candle]) -> list[IndicatorPoint]:
        """Compute indicator points for every candle."""
        pass

    @abstractmethod
    async def compute_for_store(self, store: CandleStore) -> list[IndicatorPoint]:
        """
        Compute indicator points over the full stored series.

        Results may be served from cache; the series is immutable.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
