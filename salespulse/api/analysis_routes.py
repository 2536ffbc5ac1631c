"""SalesPulse — Analysis API Routes."""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from salespulse.config import Settings, get_settings
from salespulse.database import get_record_store, get_session
from salespulse.models.analysis_models import (
    ALL_BRANCHES,
    PeriodAnalysis,
    PeriodReportResult,
    PeriodSummary,
)
from salespulse.analyzer.aggregation_engine import aggregate
from salespulse.analyzer.pipeline import (
    analyze_period_for,
    resolve_period,
    run_period_reports,
)
from salespulse.api.sales_routes import require_branch_filter
from salespulse.store.record_store import RecordStore
from salespulse.core.logging import format_period, get_logger

logger = get_logger("api.analysis")

router = APIRouter(tags=["Analysis"])


# ── Request / Response Models ──


class RunReportsRequest(BaseModel):
    """Request body for POST /reports/run."""

    month: Optional[int] = None
    """1-12. Defaults to the current month."""
    year: Optional[int] = None
    """Defaults to the current year."""
    branches: Optional[List[str]] = None
    """Branch filters to report on. Defaults to All plus every configured branch."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"month": 3, "year": 2024},
                {"month": 3, "year": 2024, "branches": ["All", "BKK01"]},
            ]
        }
    }


def _serialize(result: PeriodReportResult) -> dict:
    return {
        "id": result.id,
        "created_at": result.created_at.isoformat(),
        "schema_version": result.schema_version,
        "period": format_period(result.month, result.year),
        "branch": result.branch,
        "analysis": json.loads(result.result_json),
    }


# ── Endpoints ──


@router.get("/summary", response_model=PeriodSummary)
async def get_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    branch: str = Query(ALL_BRANCHES),
    store: RecordStore = Depends(get_record_store),
    config: Settings = Depends(get_settings),
):
    """Monthly totals, channel mix and chart series for a branch filter."""
    require_branch_filter(branch, config)
    month, year = resolve_period(month, year)
    return aggregate(store.current_snapshot(), month, year, branch)


@router.get("/analysis", response_model=PeriodAnalysis)
async def get_analysis(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    branch: str = Query(ALL_BRANCHES),
    store: RecordStore = Depends(get_record_store),
    config: Settings = Depends(get_settings),
):
    """Period summary plus trend report and narrative."""
    require_branch_filter(branch, config)
    month, year = resolve_period(month, year)
    return analyze_period_for(store.current_snapshot(), config, month, year, branch)


@router.post("/reports/run")
async def trigger_reports(
    request: RunReportsRequest,
    session: Session = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
    config: Settings = Depends(get_settings),
):
    """Compute and store period reports."""
    if request.month is not None and not 1 <= request.month <= 12:
        raise HTTPException(status_code=422, detail="month must be between 1 and 12")
    for branch in request.branches or []:
        require_branch_filter(branch, config)

    month, year = resolve_period(request.month, request.year)
    try:
        results = run_period_reports(
            session, store, config, month, year, request.branches
        )
    except Exception as e:
        logger.error(f"Report run failed: {e}")
        raise HTTPException(status_code=500, detail=f"Report run failed: {str(e)}")

    return {
        "status": "success",
        "count": len(results),
        "results": [_serialize(r) for r in results],
    }


@router.get("/reports/latest")
async def get_latest_report(
    branch: str = Query(ALL_BRANCHES),
    session: Session = Depends(get_session),
    config: Settings = Depends(get_settings),
):
    """Get the most recent stored report for a branch filter."""
    result = session.exec(
        select(PeriodReportResult)
        .where(
            PeriodReportResult.app_id == config.app_id,
            PeriodReportResult.branch == branch,
        )
        .order_by(PeriodReportResult.created_at.desc())  # type: ignore
        .limit(1)
    ).first()

    if not result:
        return {"status": "no_data", "message": "No report has been run yet."}

    return {"status": "success", **_serialize(result)}


@router.get("/reports")
async def list_reports(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
    config: Settings = Depends(get_settings),
):
    """Get stored reports, newest first, optionally for one period."""
    query = select(PeriodReportResult).where(
        PeriodReportResult.app_id == config.app_id
    )
    if month is not None:
        query = query.where(PeriodReportResult.month == month)
    if year is not None:
        query = query.where(PeriodReportResult.year == year)
    query = query.order_by(PeriodReportResult.created_at.desc()).limit(limit)  # type: ignore

    results = session.exec(query).all()

    return {
        "status": "success",
        "count": len(results),
        "results": [_serialize(r) for r in results],
    }
