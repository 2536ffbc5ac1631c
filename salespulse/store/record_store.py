"""SalesPulse — Record Store.

Keyed, upsertable collection of daily sales records. Consumers never get a
stream: they read `current_snapshot()` synchronously, or register a handler
with `on_snapshot_change()` that receives the full snapshot after each write.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from salespulse.models.sales_models import SalesRecord, make_record_key
from salespulse.core.logging import get_logger

logger = get_logger("store")

SnapshotHandler = Callable[[List[SalesRecord]], None]


class RecordStore(ABC):
    """Abstract base for sales record persistence."""

    def __init__(self) -> None:
        self._handlers: List[SnapshotHandler] = []

    # ── Subscription ──

    def on_snapshot_change(self, handler: SnapshotHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unregisters it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def _notify(self) -> None:
        if not self._handlers:
            return
        snapshot = self.current_snapshot()
        for handler in list(self._handlers):
            try:
                handler(snapshot)
            except Exception as e:
                logger.error(f"Snapshot handler {handler!r} failed: {e}")

    # ── Writes ──

    def upsert(self, record: SalesRecord) -> SalesRecord:
        """Insert or replace the record for (branch, sales_date)."""
        stored = self._write(record)
        logger.info(
            f"Upserted {stored.record_key}",
            extra={"record_key": stored.record_key, "branch": stored.branch},
        )
        self._notify()
        return stored

    @abstractmethod
    def _write(self, record: SalesRecord) -> SalesRecord:
        ...

    # ── Reads ──

    @abstractmethod
    def get(self, branch: str, sales_date: date) -> Optional[SalesRecord]:
        """Return the record for (branch, sales_date), if any."""
        ...

    @abstractmethod
    def current_snapshot(self) -> List[SalesRecord]:
        """Return every record. Order is implementation-defined."""
        ...


class InMemoryRecordStore(RecordStore):
    """Dict-backed store keyed by record_key."""

    def __init__(self, app_id: str = "") -> None:
        super().__init__()
        self.app_id = app_id
        self._records: Dict[str, SalesRecord] = {}

    def _write(self, record: SalesRecord) -> SalesRecord:
        record.app_id = self.app_id
        self._records[record.record_key] = record
        return record

    def get(self, branch: str, sales_date: date) -> Optional[SalesRecord]:
        return self._records.get(make_record_key(branch, sales_date))

    def current_snapshot(self) -> List[SalesRecord]:
        return list(self._records.values())


class SQLRecordStore(RecordStore):
    """SQLModel-backed store scoped to one app_id."""

    def __init__(self, engine: Engine, app_id: str) -> None:
        super().__init__()
        self.engine = engine
        self.app_id = app_id

    def _find(
        self, session: Session, branch: str, sales_date: date
    ) -> Optional[SalesRecord]:
        return session.exec(
            select(SalesRecord).where(
                SalesRecord.app_id == self.app_id,
                SalesRecord.branch == branch,
                SalesRecord.sales_date == sales_date,
            )
        ).first()

    def _write(self, record: SalesRecord) -> SalesRecord:
        with Session(self.engine) as session:
            existing = self._find(session, record.branch, record.sales_date)
            if existing:
                existing.copy_figures_from(record)
                target = existing
            else:
                record.app_id = self.app_id
                target = record
            session.add(target)
            session.commit()
            session.refresh(target)
            return target

    def get(self, branch: str, sales_date: date) -> Optional[SalesRecord]:
        with Session(self.engine) as session:
            return self._find(session, branch, sales_date)

    def current_snapshot(self) -> List[SalesRecord]:
        """All records for this app_id, newest first."""
        with Session(self.engine) as session:
            return list(
                session.exec(
                    select(SalesRecord)
                    .where(SalesRecord.app_id == self.app_id)
                    .order_by(SalesRecord.sales_date.desc())  # type: ignore
                ).all()
            )
