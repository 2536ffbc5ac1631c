"""SalesPulse — Analysis Pipeline Orchestrator.

Runs the period data flow on a snapshot of records:
  filter + sort → summarize → trend report → (optionally) store result

Every run starts from the full snapshot; nothing is carried over between runs.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlmodel import Session

from salespulse.config import Settings
from salespulse.models.sales_models import SalesRecord
from salespulse.models.analysis_models import (
    ALL_BRANCHES,
    PeriodAnalysis,
    PeriodReportResult,
    TrendThresholds,
)
from salespulse.analyzer.aggregation_engine import filter_records, summarize
from salespulse.analyzer.trend_engine import DEFAULT_THRESHOLDS, analyze
from salespulse.store.record_store import RecordStore
from salespulse.core.logging import format_period, get_logger, period_extra

logger = get_logger("analyzer.pipeline")


def resolve_period(
    month: Optional[int] = None, year: Optional[int] = None
) -> tuple[int, int]:
    """Fill a missing month/year from the current UTC date."""
    today = datetime.now(timezone.utc).date()
    return month or today.month, year or today.year


def analyze_period(
    records: Iterable[SalesRecord],
    month: int,
    year: int,
    branch: str = ALL_BRANCHES,
    thresholds: TrendThresholds = DEFAULT_THRESHOLDS,
    schema_version: str = "1.0.0",
    currency: str = "THB",
) -> PeriodAnalysis:
    """Summary and trend report for one month/year/branch filter."""
    filtered = filter_records(records, month, year, branch)
    summary = summarize(filtered, month, year, branch)
    report = analyze(filtered, summary, thresholds)
    return PeriodAnalysis(
        schema_version=schema_version,
        generated_at=datetime.now(timezone.utc).isoformat(),
        currency=currency,
        summary=summary,
        report=report,
    )


def analyze_period_for(
    records: Iterable[SalesRecord],
    config: Settings,
    month: int,
    year: int,
    branch: str = ALL_BRANCHES,
) -> PeriodAnalysis:
    """`analyze_period` with thresholds and labels taken from config."""
    return analyze_period(
        records,
        month,
        year,
        branch,
        thresholds=config.trend_thresholds,
        schema_version=config.report_schema_version,
        currency=config.currency,
    )


def save_period_report(
    session: Session, app_id: str, analysis: PeriodAnalysis
) -> PeriodReportResult:
    """Persist an analysis as a versioned PeriodReportResult."""
    result = PeriodReportResult(
        schema_version=analysis.schema_version,
        app_id=app_id,
        month=analysis.summary.month,
        year=analysis.summary.year,
        branch=analysis.summary.branch,
        result_json=analysis.model_dump_json(),
    )
    session.add(result)
    session.commit()
    session.refresh(result)
    logger.info(
        f"Stored report id {result.id} for {format_period(result.month, result.year)}",
        extra=period_extra(result.month, result.year, result.branch),
    )
    return result


def run_period_reports(
    session: Session,
    store: RecordStore,
    config: Settings,
    month: int,
    year: int,
    branches: Optional[List[str]] = None,
) -> List[PeriodReportResult]:
    """Analyze and store one report per branch filter (default: All + each branch)."""
    snapshot = store.current_snapshot()
    filters = branches or [ALL_BRANCHES, *config.branch_codes]
    return [
        save_period_report(
            session,
            config.app_id,
            analyze_period_for(snapshot, config, month, year, branch),
        )
        for branch in filters
    ]


class PeriodWatcher:
    """Keeps the analysis for one filter in step with a record store.

    Each snapshot change or filter change replaces `latest` with a fresh
    analysis of the whole current snapshot.
    """

    def __init__(
        self,
        store: RecordStore,
        month: int,
        year: int,
        branch: str = ALL_BRANCHES,
        config: Optional[Settings] = None,
    ):
        self.store = store
        self.month = month
        self.year = year
        self.branch = branch
        self.config = config
        self.latest: PeriodAnalysis = self._compute(store.current_snapshot())
        self._unsubscribe = store.on_snapshot_change(self._on_snapshot)

    def _compute(self, snapshot: List[SalesRecord]) -> PeriodAnalysis:
        if self.config is None:
            return analyze_period(snapshot, self.month, self.year, self.branch)
        return analyze_period_for(
            snapshot, self.config, self.month, self.year, self.branch
        )

    def _on_snapshot(self, snapshot: List[SalesRecord]) -> None:
        self.latest = self._compute(snapshot)

    def set_filter(self, month: int, year: int, branch: str = ALL_BRANCHES) -> PeriodAnalysis:
        self.month, self.year, self.branch = month, year, branch
        self.latest = self._compute(self.store.current_snapshot())
        return self.latest

    def close(self) -> None:
        self._unsubscribe()
