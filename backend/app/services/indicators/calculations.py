"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the chart indicators.
All math is deterministic; every value at index i depends only on closes[0..i].
Warm-up positions are NaN.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

DEFAULT_PERIOD = 14


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int = DEFAULT_PERIOD) -> np.ndarray:
    """Simple Moving Average over the trailing `period` values (NaN for i < period - 1)."""
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    windows = sliding_window_view(np.asarray(data, dtype=float), period)
    result[period - 1 :] = windows.mean(axis=1)
    return result


def ema(data: np.ndarray, period: int = DEFAULT_PERIOD) -> np.ndarray:
    """
    Exponential Moving Average seeded by the first value.

    ema[0] = data[0]
    ema[i] = data[i] * k + ema[i - 1] * (1 - k),  k = 2 / (period + 1)
    """
    result = np.full(len(data), np.nan)
    if len(data) == 0:
        return result

    multiplier = 2 / (period + 1)
    result[0] = data[0]
    for i in range(1, len(data)):
        result[i] = data[i] * multiplier + result[i - 1] * (1 - multiplier)
    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        # Flat market reads as neutral; only gains reads as maximum strength
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(closes: np.ndarray, period: int = DEFAULT_PERIOD) -> np.ndarray:
    """
    Relative Strength Index with Wilder smoothing.

    The first value is at index period - 1, seeded with the plain mean of the
    gains/losses of deltas 1..period-1. From there:
        avg[i] = (avg[i - 1] * (period - 1) + x[i]) / period
    """
    result = np.full(len(closes), np.nan)
    if len(closes) < period:
        return result

    deltas = np.diff(np.asarray(closes, dtype=float))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # deltas[j] is the change into closes[j + 1]
    seed = period - 1
    avg_gain = float(np.mean(gains[:seed])) if seed > 0 else 0.0
    avg_loss = float(np.mean(losses[:seed])) if seed > 0 else 0.0
    result[seed] = _rsi_value(avg_gain, avg_loss)

    for i in range(seed + 1, len(closes)):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def to_optional(arr: np.ndarray) -> list:
    """Array to list of floats with NaN replaced by None."""
    return [None if np.isnan(v) else float(v) for v in arr]
