"""
Chart Query Service

CONTRACT:
    get_candles(limit?)    -> list[Candle]
    get_indicators()       -> list[IndicatorPoint]
    get_fib(start?, end?)  -> FibLevels

Parameter parsing and response shaping only; no business logic.
"""

from app.services.chart.service import (
    ChartQueryService,
    build_chart_service,
    describe_error,
    parse_bound,
)

__all__ = [
    "ChartQueryService",
    "build_chart_service",
    "describe_error",
    "parse_bound",
]
