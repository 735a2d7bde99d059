"""
Chart Data Contracts

Candle: one OHLCV bar of the series (stored once, never mutated)
IndicatorPoint: derived SMA/EMA/RSI values aligned to one candle
FibLevels: retracement levels over a (low, high) price range

These are the response bodies of the /api endpoints.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# SERIES
# =============================================================================


class Candle(BaseModel):
    """
    Single candlestick data point.

    Rows are passed through as ingested: low/high consistency with
    open/close is expected of the source but not enforced.
    """

    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(..., description="Traded volume for the bar")


class SeriesStatus(BaseModel):
    """State of the durable candle store."""

    loaded: bool
    load_id: Optional[str] = None
    source_path: Optional[str] = None
    candle_count: int = Field(default=0, ge=0)
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None
    loaded_at: Optional[datetime] = None


# =============================================================================
# INDICATORS
# =============================================================================


class IndicatorPoint(BaseModel):
    """
    Indicator values for one candle.

    None means "not yet available": SMA/RSI during the 14-candle warm-up.
    EMA is seeded by the first close and is always present.
    """

    timestamp: datetime
    sma_14: Optional[float] = None
    ema_14: Optional[float] = None
    rsi_14: Optional[float] = Field(default=None, ge=0, le=100)


# =============================================================================
# FIBONACCI RETRACEMENT
# =============================================================================


class PriceRange(BaseModel):
    """Lowest low and highest high across a window of candles."""

    low: float
    high: float
    candle_count: int = Field(default=0, ge=0)


class FibLevel(BaseModel):
    ratio: float = Field(..., ge=0, le=1)
    value: float


class FibLevels(BaseModel):
    """Retracement levels ordered by ascending ratio (ratio 0 = high, 1 = low)."""

    low: float
    high: float
    levels: list[FibLevel]

    class Config:
        json_schema_extra = {
            "example": {
                "low": 9.0,
                "high": 13.0,
                "levels": [
                    {"ratio": 0.0, "value": 13.0},
                    {"ratio": 0.236, "value": 12.056},
                    {"ratio": 0.382, "value": 11.472},
                    {"ratio": 0.5, "value": 11.0},
                    {"ratio": 0.618, "value": 10.528},
                    {"ratio": 0.786, "value": 9.856},
                    {"ratio": 1.0, "value": 9.0},
                ],
            }
        }


# =============================================================================
# ERRORS
# =============================================================================


class ErrorResponse(BaseModel):
    """Body carried in HTTPException.detail for service errors."""

    error: str
    message: str
    details: dict = Field(default_factory=dict)
