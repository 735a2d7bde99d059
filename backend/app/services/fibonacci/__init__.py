"""
Fibonacci Retracement

Turns a (low, high) price range into the standard retracement level set.
"""

from app.services.fibonacci.levels import FIB_RATIOS, retracement_levels, retracement_value

__all__ = [
    "FIB_RATIOS",
    "retracement_levels",
    "retracement_value",
]
