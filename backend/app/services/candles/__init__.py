"""
Candle Store Service

CONTRACT:
    load_or_open(source) -> CandleStore
    CandleStore.scan(limit?) -> list[Candle] (ascending; tail when limited)
    CandleStore.range_extrema(start?, end?) -> PriceRange

RESPONSIBILITIES:
    - Build the SQLite store from the source CSV exactly once
    - Serve ordered scans and timestamp-range aggregates
"""

from app.services.candles.source import read_source_candles
from app.services.candles.store import CandleStore, IngestionGuard, load_or_open

__all__ = [
    "read_source_candles",
    "CandleStore",
    "IngestionGuard",
    "load_or_open",
]
