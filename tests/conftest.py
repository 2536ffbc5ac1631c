"""Shared fixtures for SalesPulse tests."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from salespulse.config import Settings
from salespulse.analyzer.metrics_engine import compute_sales_record
from salespulse.models import analysis_models, sales_models  # noqa: F401
from salespulse.store.record_store import InMemoryRecordStore, SQLRecordStore

FIXED_NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return Settings(
        _env_file=None,
        app_id="test-tenant",
        branch_codes=["A", "B", "C"],
        scheduler_enabled=False,
    )


@pytest.fixture
def make_record():
    """Factory: make_record("A", date(2024, 3, 1), in_store_sales=1000, ...)."""

    def _make(branch: str, day: date, **raw):
        return compute_sales_record(
            raw, branch=branch, sales_date=day, updated_at=FIXED_NOW
        )

    return _make


@pytest.fixture
def two_day_records(make_record):
    """Branch A: day 1 total 1000 / target 900, day 2 total 1200 / target 900."""
    return [
        make_record("A", date(2024, 3, 1), in_store_sales=1000, target_sales=900),
        make_record("A", date(2024, 3, 2), in_store_sales=1200, target_sales=900),
    ]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def memory_store(config):
    return InMemoryRecordStore(app_id=config.app_id)


@pytest.fixture
def sql_store(engine, config):
    return SQLRecordStore(engine, app_id=config.app_id)
