"""
Source file reader for the candle series.

Reads the whole tabular source (CSV with a header row naming timestamp, open,
high, low, close, volume) into memory. Any row that fails to parse aborts the
read with IngestionError; rows are never skipped.
"""

import csv
import logging
import math
import os

from app.core.timestamps import parse_source_timestamp
from app.schemas.chart import Candle
from app.services.base import IngestionError

logger = logging.getLogger(__name__)

SERVICE_NAME = "CandleSource"
REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")
PRICE_COLUMNS = ("open", "high", "low", "close")


def _parse_number(raw: str, column: str, line: int) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise IngestionError(
            SERVICE_NAME,
            f"Line {line}: column '{column}' is not a number: {raw!r}",
            {"line": line, "column": column},
        )
    if not math.isfinite(value):
        raise IngestionError(
            SERVICE_NAME,
            f"Line {line}: column '{column}' is not finite: {raw!r}",
            {"line": line, "column": column},
        )
    return value


def _parse_row(row: dict, line: int) -> Candle:
    raw_timestamp = row.get("timestamp")
    if raw_timestamp is None or not raw_timestamp.strip():
        raise IngestionError(
            SERVICE_NAME,
            f"Line {line}: missing timestamp",
            {"line": line, "column": "timestamp"},
        )
    try:
        timestamp = parse_source_timestamp(raw_timestamp)
    except ValueError:
        raise IngestionError(
            SERVICE_NAME,
            f"Line {line}: unparseable timestamp {raw_timestamp!r}",
            {"line": line, "column": "timestamp"},
        )

    values = {
        column: _parse_number(row.get(column), column, line)
        for column in PRICE_COLUMNS + ("volume",)
    }
    return Candle(timestamp=timestamp, **values)


def read_source_candles(path: str) -> list[Candle]:
    """
    Read every row of the source file, sorted by timestamp.

    Raises:
        IngestionError: file missing, header incomplete, a row unparseable,
            duplicate timestamps, or no rows at all.
    """
    if not os.path.isfile(path):
        raise IngestionError(
            SERVICE_NAME,
            f"Source file not found: {path}",
            {"path": path},
        )

    candles: list[Candle] = []
    with open(path, newline="", encoding="utf-8-sig") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if header is None:
            raise IngestionError(SERVICE_NAME, f"Source file is empty: {path}", {"path": path})

        columns = [name.strip().lower() for name in header]
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise IngestionError(
                SERVICE_NAME,
                f"Source file is missing columns: {', '.join(missing)}",
                {"path": path, "missing": missing},
            )

        for values in reader:
            line = reader.line_num
            if not any(value.strip() for value in values):
                continue
            if len(values) != len(columns):
                raise IngestionError(
                    SERVICE_NAME,
                    f"Line {line}: expected {len(columns)} fields, got {len(values)}",
                    {"line": line},
                )
            candles.append(_parse_row(dict(zip(columns, values)), line))

    if not candles:
        raise IngestionError(SERVICE_NAME, f"Source file has no rows: {path}", {"path": path})

    candles.sort(key=lambda c: c.timestamp)
    for previous, current in zip(candles, candles[1:]):
        if previous.timestamp == current.timestamp:
            raise IngestionError(
                SERVICE_NAME,
                f"Duplicate timestamp in source: {current.timestamp.isoformat()}",
                {"timestamp": current.timestamp.isoformat()},
            )

    logger.debug(f"Read {len(candles)} candles from {path}")
    return candles
