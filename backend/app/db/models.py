"""
SQLAlchemy models for the candle store.

Uses SQLite for durable persistence of:
- The candle series (written once, read-only afterwards)
- The ingestion record that marks the store as complete
"""

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    DateTime,
    Index,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class CandleRecord(Base):
    """
    One OHLCV bar.
    The timestamp index serves both ordered scans and range filters.
    """
    __tablename__ = "candles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False)
    open = Column(Float, nullable=False)
    high = Column(Float, nullable=False)
    low = Column(Float, nullable=False)
    close = Column(Float, nullable=False)
    volume = Column(Float, nullable=False)

    __table_args__ = (
        Index("ix_candles_timestamp", "timestamp", unique=True),
    )


class SeriesLoad(Base):
    """
    Completed ingestion of the source file.
    Committed in the same transaction as the candles; its presence is what
    makes the store count as existing.
    """
    __tablename__ = "series_loads"

    id = Column(String(32), primary_key=True)
    source_path = Column(String(1024), nullable=False)
    row_count = Column(Integer, nullable=False)
    first_timestamp = Column(DateTime, nullable=True)
    last_timestamp = Column(DateTime, nullable=True)
    loaded_at = Column(DateTime, nullable=False)
