"""
Tests for record store upserts, snapshots and change notifications
"""

from datetime import date

import pytest

from salespulse.store.record_store import SQLRecordStore


@pytest.fixture(params=["memory", "sql"])
def store(request, memory_store, sql_store):
    return memory_store if request.param == "memory" else sql_store


class TestUpsert:
    """Keyed by (branch, sales_date)"""

    def test_insert_then_get(self, store, make_record):
        store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=100))
        record = store.get("A", date(2024, 3, 1))
        assert record is not None
        assert record.total_sales == 100
        assert record.app_id == "test-tenant"

    def test_same_key_replaces(self, store, make_record):
        store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=100))
        store.upsert(make_record("A", date(2024, 3, 1), grab_sales=250, target_sales=200))

        snapshot = store.current_snapshot()
        assert len(snapshot) == 1
        assert snapshot[0].in_store_sales == 0
        assert snapshot[0].grab_sales == 250
        assert snapshot[0].total_sales == 250
        assert snapshot[0].sales_percentage == pytest.approx(25.0)

    def test_different_branch_same_day_is_separate(self, store, make_record):
        store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=100))
        store.upsert(make_record("B", date(2024, 3, 1), in_store_sales=200))
        assert len(store.current_snapshot()) == 2

    def test_missing_record(self, store):
        assert store.get("A", date(2024, 1, 1)) is None


class TestSQLRecordStore:
    """SQL-specific behaviour"""

    def test_upsert_keeps_row_id(self, sql_store, make_record):
        first = sql_store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=1))
        second = sql_store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=2))
        assert first.id is not None
        assert second.id == first.id
        assert second.in_store_sales == 2

    def test_snapshot_is_newest_first(self, sql_store, make_record):
        for day in (3, 1, 2):
            sql_store.upsert(make_record("A", date(2024, 3, day), in_store_sales=day))
        dates = [r.sales_date for r in sql_store.current_snapshot()]
        assert dates == [date(2024, 3, 3), date(2024, 3, 2), date(2024, 3, 1)]

    def test_scoped_by_app_id(self, engine, sql_store, make_record):
        other = SQLRecordStore(engine, app_id="other-tenant")
        sql_store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=1))
        other.upsert(make_record("A", date(2024, 3, 1), in_store_sales=2))

        assert len(sql_store.current_snapshot()) == 1
        assert sql_store.get("A", date(2024, 3, 1)).in_store_sales == 1
        assert other.get("A", date(2024, 3, 1)).in_store_sales == 2


class TestSnapshotChange:
    """Handlers receive the full snapshot after each write"""

    def test_handler_receives_snapshot(self, store, make_record):
        received = []
        store.on_snapshot_change(received.append)

        store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=1))
        store.upsert(make_record("A", date(2024, 3, 2), in_store_sales=2))

        assert [len(s) for s in received] == [1, 2]

    def test_unsubscribe(self, store, make_record):
        received = []
        unsubscribe = store.on_snapshot_change(received.append)
        unsubscribe()
        unsubscribe()

        store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=1))
        assert received == []

    def test_failing_handler_does_not_block_others(self, store, make_record):
        received = []

        def broken(snapshot):
            raise RuntimeError("boom")

        store.on_snapshot_change(broken)
        store.on_snapshot_change(received.append)

        stored = store.upsert(make_record("A", date(2024, 3, 1), in_store_sales=1))
        assert stored.total_sales == 1
        assert len(received) == 1
