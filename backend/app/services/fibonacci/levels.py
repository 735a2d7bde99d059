"""
Fibonacci Retracement Calculator

Pure function of (low, high); no I/O.
"""

from app.schemas.chart import FibLevel, FibLevels

# Standard retracement drawing set, ascending
FIB_RATIOS: tuple[float, ...] = (0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0)


def retracement_value(low: float, high: float, ratio: float) -> float:
    """
    high - ratio * (high - low), written as an interpolation so that
    ratio 0 gives exactly `high` and ratio 1 gives exactly `low`.
    """
    return high * (1 - ratio) + low * ratio


def retracement_levels(low: float, high: float) -> FibLevels:
    """
    Retracement levels between `low` and `high`.

    Levels are direction-agnostic: if low > high the two are swapped rather
    than rejected, so levels(a, b) == levels(b, a).
    """
    if low > high:
        low, high = high, low

    return FibLevels(
        low=low,
        high=high,
        levels=[
            FibLevel(ratio=ratio, value=retracement_value(low, high, ratio))
            for ratio in FIB_RATIOS
        ],
    )
