"""Tests for the SQLite candle store and its ingestion guard."""

import asyncio
import os
from datetime import datetime

import pytest

from app.services.base import EmptyRangeError, IngestionError, StoreUnavailableError
from app.services.candles import IngestionGuard, read_source_candles


class CountingReader:
    """Source reader that records how often the source file is read."""

    def __init__(self):
        self.calls = 0

    def __call__(self, path):
        self.calls += 1
        return read_source_candles(path)


def open_and(store_path, source_path, action, reader=read_source_candles):
    """Open a guard, run `action(store)` and close, all on one event loop."""

    async def scenario():
        guard = IngestionGuard(store_path, source_path, reader)
        try:
            store = await guard.ensure_loaded()
            return await action(store)
        finally:
            await guard.close()

    return asyncio.run(scenario())


async def scan_all(store):
    return await store.scan()


class TestLoadOrOpen:
    def test_first_open_ingests_source(self, store_path, make_csv, example_rows):
        candles = open_and(store_path, make_csv(example_rows), scan_all)

        assert [c.close for c in candles] == [11, 12, 10]
        assert candles[0].timestamp == datetime(2024, 1, 1, 9, 0, 0)

    def test_status_after_load(self, store_path, make_csv, hourly_rows):
        async def status(store):
            return store.status()

        result = open_and(store_path, make_csv(hourly_rows), status)

        assert result.loaded is True
        assert result.candle_count == 40
        assert result.first_timestamp == datetime(2024, 3, 1, 0, 0, 0)
        assert result.last_timestamp == datetime(2024, 3, 2, 15, 0, 0)
        assert result.load_id

    def test_reopen_does_not_reread_source(self, store_path, make_csv, example_rows):
        source = make_csv(example_rows)
        original = open_and(store_path, source, scan_all)

        # Sentinel: rewrite the source with different prices
        make_csv([(ts, 1, 1, 1, 1, 1) for ts, *_ in example_rows])
        reader = CountingReader()
        reopened = open_and(store_path, source, scan_all, reader)

        assert reader.calls == 0
        assert reopened == original

    def test_reopen_keeps_load_id(self, store_path, make_csv, example_rows):
        source = make_csv(example_rows)

        async def load_id(store):
            return store.load_id

        assert open_and(store_path, source, load_id) == open_and(store_path, source, load_id)

    def test_existing_store_without_source(self, store_path, make_csv, example_rows, tmp_path):
        open_and(store_path, make_csv(example_rows), scan_all)

        candles = open_and(store_path, str(tmp_path / "gone.csv"), scan_all)
        assert len(candles) == 3

    def test_missing_store_and_source_is_fatal(self, store_path, tmp_path):
        with pytest.raises(IngestionError):
            open_and(store_path, str(tmp_path / "gone.csv"), scan_all)

    def test_failed_ingestion_commits_nothing(self, store_path, make_csv, example_rows):
        source = make_csv(example_rows + [("2024-01-01 12:00:00", "x", 1, 1, 1, 1)])
        with pytest.raises(IngestionError):
            open_and(store_path, source, scan_all)

        make_csv(example_rows)
        reader = CountingReader()
        candles = open_and(store_path, source, scan_all, reader)

        assert reader.calls == 1
        assert len(candles) == 3

    def test_unreadable_store_file(self, store_path, make_csv, example_rows):
        os.makedirs(os.path.dirname(store_path), exist_ok=True)
        with open(store_path, "wb") as handle:
            handle.write(b"definitely not sqlite " * 200)

        with pytest.raises(StoreUnavailableError):
            open_and(store_path, make_csv(example_rows), scan_all)


class TestConcurrentStartup:
    def test_concurrent_callers_ingest_once(self, store_path, make_csv, hourly_rows):
        reader = CountingReader()
        guard = IngestionGuard(store_path, make_csv(hourly_rows), reader)

        async def scenario():
            try:
                stores = await asyncio.gather(*[guard.ensure_loaded() for _ in range(10)])
                count = await stores[0].count()
                return stores, count
            finally:
                await guard.close()

        stores, count = asyncio.run(scenario())

        assert reader.calls == 1
        assert all(s is stores[0] for s in stores)
        assert count == 40

    def test_separate_guards_share_one_ingestion(self, store_path, make_csv, hourly_rows):
        source = make_csv(hourly_rows)
        readers = [CountingReader(), CountingReader()]
        guards = [IngestionGuard(store_path, source, reader) for reader in readers]

        async def scenario():
            try:
                stores = await asyncio.gather(*[g.ensure_loaded() for g in guards])
                counts = [await s.count() for s in stores]
                return stores, counts
            finally:
                for guard in guards:
                    await guard.close()

        stores, counts = asyncio.run(scenario())

        assert stores[0].load_id == stores[1].load_id
        assert counts == [40, 40]
        assert sum(r.calls for r in readers) == 1

    def test_guard_reports_unloaded_before_first_call(self, store_path, make_csv, example_rows):
        guard = IngestionGuard(store_path, make_csv(example_rows))

        assert guard.is_loaded is False
        assert guard.status().loaded is False


class TestScan:
    def test_limit_returns_most_recent_tail(self, store_path, make_csv, hourly_rows):
        async def action(store):
            return await store.scan(5), await store.scan()

        tail, everything = open_and(store_path, make_csv(hourly_rows), action)

        assert tail == everything[-5:]
        assert [c.timestamp for c in tail] == sorted(c.timestamp for c in tail)

    def test_limit_larger_than_series(self, store_path, make_csv, example_rows):
        async def action(store):
            return await store.scan(100)

        assert len(open_and(store_path, make_csv(example_rows), action)) == 3

    def test_rejects_non_positive_limit(self, store_path, make_csv, example_rows):
        async def action(store):
            return await store.scan(0)

        with pytest.raises(ValueError):
            open_and(store_path, make_csv(example_rows), action)


class TestRangeExtrema:
    def test_whole_series(self, store_path, make_csv, hourly_rows):
        async def action(store):
            return await store.range_extrema()

        result = open_and(store_path, make_csv(hourly_rows), action)

        assert result.low == min(row[3] for row in hourly_rows)
        assert result.high == max(row[2] for row in hourly_rows)
        assert result.candle_count == 40

    def test_bounds_are_inclusive(self, store_path, make_csv, example_rows):
        async def action(store):
            return await store.range_extrema(
                datetime(2024, 1, 1, 10, 0, 0), datetime(2024, 1, 1, 11, 0, 0)
            )

        result = open_and(store_path, make_csv(example_rows), action)

        assert (result.low, result.high, result.candle_count) == (9, 13, 2)

    def test_single_instant(self, store_path, make_csv, example_rows):
        instant = datetime(2024, 1, 1, 10, 0, 0)

        async def action(store):
            return await store.range_extrema(instant, instant)

        result = open_and(store_path, make_csv(example_rows), action)

        assert (result.low, result.high) == (10, 13)

    def test_open_ended(self, store_path, make_csv, example_rows):
        async def action(store):
            return (
                await store.range_extrema(start=datetime(2024, 1, 1, 10, 30, 0)),
                await store.range_extrema(end=datetime(2024, 1, 1, 9, 0, 0)),
            )

        after, before = open_and(store_path, make_csv(example_rows), action)

        assert (after.low, after.high) == (9, 11)
        assert (before.low, before.high) == (9, 12)

    def test_start_after_end(self, store_path, make_csv, example_rows):
        async def action(store):
            return await store.range_extrema(
                datetime(2024, 1, 1, 11, 0, 0), datetime(2024, 1, 1, 9, 0, 0)
            )

        with pytest.raises(EmptyRangeError):
            open_and(store_path, make_csv(example_rows), action)

    def test_no_candles_in_range(self, store_path, make_csv, example_rows):
        async def action(store):
            return await store.range_extrema(datetime(2030, 1, 1), datetime(2030, 1, 2))

        with pytest.raises(EmptyRangeError) as exc_info:
            open_and(store_path, make_csv(example_rows), action)
        assert exc_info.value.details["start"] == "2030-01-01 00:00:00"
