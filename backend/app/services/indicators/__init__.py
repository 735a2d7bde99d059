"""
Indicator Engine Service

CONTRACT:
    Input:  list[Candle] (ascending timestamps)
    Output: list[IndicatorPoint] (one per candle)

RESPONSIBILITIES:
    - SMA-14: mean of the trailing 14 closes
    - EMA-14: exponential average seeded by the first close
    - RSI-14: Wilder-smoothed relative strength

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from app.services.indicators.interface import IndicatorServiceInterface
from app.services.indicators.service import IndicatorService, compute_indicator_points

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "compute_indicator_points",
]
