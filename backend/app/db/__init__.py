"""
Database module for the candle store.

Provides SQLite database connection and models.
"""

from app.db.database import (
    create_store_engine,
    create_session_factory,
    close_engine,
)
from app.db.models import Base, CandleRecord, SeriesLoad

__all__ = [
    "create_store_engine",
    "create_session_factory",
    "close_engine",
    "Base",
    "CandleRecord",
    "SeriesLoad",
]
