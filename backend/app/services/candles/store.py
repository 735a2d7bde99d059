"""
Candle Store

Durable, ordered storage of the candle series in SQLite.

The store is built once from the source file and never written again.
IngestionGuard serialises cold-start ingestion so concurrent first requests
load the series exactly once; after that the data is immutable and
CandleStore handles are shared by all readers without locking.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import delete, func, insert, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.core.timestamps import format_timestamp
from app.db.database import create_store_engine, create_session_factory, close_engine
from app.db.models import Base, CandleRecord, SeriesLoad
from app.schemas.chart import Candle, PriceRange, SeriesStatus
from app.services.base import EmptyRangeError, StoreUnavailableError
from app.services.candles.source import read_source_candles

logger = logging.getLogger(__name__)

SERVICE_NAME = "CandleStore"
INSERT_BATCH_SIZE = 5000


@dataclass(frozen=True)
class LoadInfo:
    """Snapshot of the series_loads row for the store in use."""

    load_id: str
    source_path: str
    row_count: int
    first_timestamp: Optional[datetime]
    last_timestamp: Optional[datetime]
    loaded_at: datetime


def _load_info(record: SeriesLoad) -> LoadInfo:
    return LoadInfo(
        load_id=record.id,
        source_path=record.source_path,
        row_count=record.row_count,
        first_timestamp=record.first_timestamp,
        last_timestamp=record.last_timestamp,
        loaded_at=record.loaded_at,
    )


def _to_candle(record: CandleRecord) -> Candle:
    return Candle.model_validate(record)


class CandleStore:
    """
    Read-only handle over a loaded candle series.

    All reads go through the timestamp index: scans are ordered by it and
    range queries filter on it.
    """

    def __init__(self, engine: AsyncEngine, load: LoadInfo):
        self._engine = engine
        self._sessions = create_session_factory(engine)
        self._load = load

    @property
    def load_id(self) -> str:
        """Identifier of the ingestion that produced this series."""
        return self._load.load_id

    async def _fetch_all(self, stmt):
        try:
            async with self._sessions() as session:
                result = await session.execute(stmt)
                return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Candle store read failed: {e}")
            raise StoreUnavailableError(SERVICE_NAME, "Candle store is unavailable") from e

    async def scan(self, limit: Optional[int] = None) -> list[Candle]:
        """
        Candles in ascending timestamp order.

        With `limit`, only the most recent `limit` candles (the tail).
        """
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        if limit is None:
            stmt = select(CandleRecord).order_by(CandleRecord.timestamp.asc())
            return [_to_candle(r) for r in await self._fetch_all(stmt)]

        stmt = (
            select(CandleRecord)
            .order_by(CandleRecord.timestamp.desc())
            .limit(limit)
        )
        records = await self._fetch_all(stmt)
        return [_to_candle(r) for r in reversed(records)]

    async def load_all(self) -> list[Candle]:
        """The full series, oldest first."""
        return await self.scan()

    async def count(self) -> int:
        try:
            async with self._sessions() as session:
                result = await session.execute(select(func.count(CandleRecord.id)))
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise StoreUnavailableError(SERVICE_NAME, "Candle store is unavailable") from e

    async def range_extrema(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> PriceRange:
        """
        Lowest low and highest high over [start, end], both ends inclusive.

        A missing bound is open on that side.

        Raises:
            EmptyRangeError: start is after end, or no candle falls in range.
        """
        if start is not None and end is not None and start > end:
            raise EmptyRangeError(
                SERVICE_NAME,
                f"Range start {format_timestamp(start)} is after end {format_timestamp(end)}",
                {"start": format_timestamp(start), "end": format_timestamp(end)},
            )

        stmt = select(
            func.min(CandleRecord.low),
            func.max(CandleRecord.high),
            func.count(CandleRecord.id),
        )
        if start is not None:
            stmt = stmt.where(CandleRecord.timestamp >= start)
        if end is not None:
            stmt = stmt.where(CandleRecord.timestamp <= end)

        try:
            async with self._sessions() as session:
                low, high, count = (await session.execute(stmt)).one()
        except SQLAlchemyError as e:
            logger.error(f"Range query failed: {e}")
            raise StoreUnavailableError(SERVICE_NAME, "Candle store is unavailable") from e

        if not count:
            details = {}
            if start is not None:
                details["start"] = format_timestamp(start)
            if end is not None:
                details["end"] = format_timestamp(end)
            raise EmptyRangeError(SERVICE_NAME, "No candles in the requested range", details)

        return PriceRange(low=low, high=high, candle_count=count)

    def status(self) -> SeriesStatus:
        return SeriesStatus(
            loaded=True,
            load_id=self._load.load_id,
            source_path=self._load.source_path,
            candle_count=self._load.row_count,
            first_timestamp=self._load.first_timestamp,
            last_timestamp=self._load.last_timestamp,
            loaded_at=self._load.loaded_at,
        )


# =============================================================================
# LOAD / INGEST
# =============================================================================


async def _find_load(conn: AsyncConnection) -> Optional[LoadInfo]:
    """Return the completed ingestion record, or None if the store is absent."""
    has_table = await conn.run_sync(
        lambda sync_conn: inspect(sync_conn).has_table(SeriesLoad.__tablename__)
    )
    if not has_table:
        return None

    result = await conn.execute(
        select(SeriesLoad.__table__).order_by(SeriesLoad.loaded_at.desc()).limit(1)
    )
    row = result.first()
    return _load_info(row) if row else None


async def _ingest(
    engine: AsyncEngine,
    source_path: str,
    reader: Callable[[str], list[Candle]],
) -> LoadInfo:
    """
    Build the store from the source in one write transaction.

    The transaction starts with BEGIN IMMEDIATE, so only one connection to the
    file can be ingesting at a time. Once the lock is held the load record is
    checked again: another process may have completed the ingestion while
    this one waited, and its load is returned as is.
    """
    started = time.perf_counter()

    async with engine.begin() as conn:
        await conn.exec_driver_sql("BEGIN IMMEDIATE")

        existing = await _find_load(conn)
        if existing is not None:
            logger.info(f"Candle store was built by another process (load {existing.load_id})")
            return existing

        # Parse fully before writing so a bad row commits nothing
        candles = await asyncio.to_thread(reader, source_path)

        load = LoadInfo(
            load_id=uuid.uuid4().hex,
            source_path=source_path,
            row_count=len(candles),
            first_timestamp=candles[0].timestamp if candles else None,
            last_timestamp=candles[-1].timestamp if candles else None,
            loaded_at=datetime.utcnow(),
        )

        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(delete(CandleRecord))
        rows = [c.model_dump() for c in candles]
        for offset in range(0, len(rows), INSERT_BATCH_SIZE):
            await conn.execute(insert(CandleRecord), rows[offset : offset + INSERT_BATCH_SIZE])
        await conn.execute(
            insert(SeriesLoad).values(
                id=load.load_id,
                source_path=load.source_path,
                row_count=load.row_count,
                first_timestamp=load.first_timestamp,
                last_timestamp=load.last_timestamp,
                loaded_at=load.loaded_at,
            )
        )

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info(f"Ingested {load.row_count} candles from {source_path} in {elapsed_ms}ms")
    return load


async def load_or_open(
    engine: AsyncEngine,
    source_path: str,
    reader: Callable[[str], list[Candle]] = read_source_candles,
) -> CandleStore:
    """
    Open the store behind `engine`, ingesting `source_path` first if absent.

    The source is only read when no completed ingestion exists. Separate
    processes opening the same file are serialised by SQLite's write lock;
    within one process IngestionGuard serialises callers.

    Raises:
        IngestionError: the store is absent and the source is missing or malformed.
        StoreUnavailableError: the store file cannot be opened or written.
    """
    try:
        async with engine.connect() as conn:
            load = await _find_load(conn)
    except SQLAlchemyError as e:
        raise StoreUnavailableError(SERVICE_NAME, f"Cannot open candle store: {e}") from e

    if load is not None:
        logger.info(f"Using existing candle store ({load.row_count} candles, load {load.load_id})")
        return CandleStore(engine, load)

    logger.info(f"Candle store absent, ingesting {source_path}")
    try:
        load = await _ingest(engine, source_path, reader)
    except SQLAlchemyError as e:
        logger.error(f"Candle store ingestion failed: {e}")
        raise StoreUnavailableError(SERVICE_NAME, f"Cannot build candle store: {e}") from e
    return CandleStore(engine, load)


class IngestionGuard:
    """
    Process-wide owner of the candle store.

    ensure_loaded() is the only way to obtain a CandleStore. The first caller
    opens (or builds) the store under an exclusive lock; callers arriving
    while that is in progress wait for it and receive the same handle.
    Guards in other processes on the same file wait on SQLite's write lock
    for up to `busy_timeout` seconds.
    """

    def __init__(
        self,
        sqlite_path: str,
        source_path: str,
        reader: Callable[[str], list[Candle]] = read_source_candles,
        busy_timeout: float = 30.0,
    ):
        self.sqlite_path = sqlite_path
        self.source_path = source_path
        self.busy_timeout = busy_timeout
        self._reader = reader
        self._lock = asyncio.Lock()
        self._engine: Optional[AsyncEngine] = None
        self._store: Optional[CandleStore] = None

    @property
    def is_loaded(self) -> bool:
        return self._store is not None

    async def ensure_loaded(self) -> CandleStore:
        if self._store is not None:
            return self._store

        async with self._lock:
            if self._store is None:
                if self._engine is None:
                    self._engine = create_store_engine(self.sqlite_path, self.busy_timeout)
                self._store = await load_or_open(self._engine, self.source_path, self._reader)
        return self._store

    def status(self) -> SeriesStatus:
        if self._store is None:
            return SeriesStatus(loaded=False, source_path=self.source_path)
        return self._store.status()

    async def close(self) -> None:
        if self._engine is not None:
            await close_engine(self._engine)
        self._engine = None
        self._store = None
