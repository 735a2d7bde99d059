"""
Chart Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from app.schemas.chart import (
    Candle,
    SeriesStatus,
    IndicatorPoint,
    PriceRange,
    FibLevel,
    FibLevels,
    ErrorResponse,
)

__all__ = [
    # Series
    "Candle",
    "SeriesStatus",
    # Indicators
    "IndicatorPoint",
    # Fibonacci
    "PriceRange",
    "FibLevel",
    "FibLevels",
    # Errors
    "ErrorResponse",
]
