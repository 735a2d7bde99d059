"""Pytest configuration and shared fixtures."""

import csv
from datetime import datetime, timedelta
from pathlib import Path

import pytest

HEADER = ["timestamp", "open", "high", "low", "close", "volume"]


@pytest.fixture
def make_csv(tmp_path: Path):
    """Write rows to a CSV file in tmp_path and return its path as a string."""

    def _make(rows, name: str = "stocks.csv", header=HEADER) -> str:
        path = tmp_path / name
        with open(path, "w", newline="") as handle:
            writer = csv.writer(handle)
            if header is not None:
                writer.writerow(header)
            writer.writerows(rows)
        return str(path)

    return _make


@pytest.fixture
def store_path(tmp_path: Path) -> str:
    """SQLite path in a directory that does not exist yet."""
    return str(tmp_path / "store" / "candles.db")


@pytest.fixture
def example_rows():
    """Three-candle series with low 9 and high 13 overall."""
    return [
        ("2024-01-01 09:00:00", 10, 12, 9, 11, 1000),
        ("2024-01-01 10:00:00", 11, 13, 10, 12, 1500),
        ("2024-01-01 11:00:00", 12, 11, 9, 10, 1200),
    ]


@pytest.fixture
def hourly_rows():
    """40 hourly candles with a zig-zag close, written out of order."""
    start = datetime(2024, 3, 1, 0, 0, 0)
    rows = []
    for i in range(40):
        close = 100 + (i % 7) * 1.5 - (i % 3)
        rows.append(
            (
                (start + timedelta(hours=i)).strftime("%Y-%m-%d %H:%M:%S"),
                close - 0.5,
                close + 2 + i * 0.01,
                close - 2 - i * 0.01,
                close,
                1000 + i,
            )
        )
    return list(reversed(rows))
