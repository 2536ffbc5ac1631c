"""SalesPulse — Sales Record API Routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from salespulse.config import Settings, get_settings
from salespulse.database import get_record_store
from salespulse.models.analysis_models import ALL_BRANCHES
from salespulse.models.sales_models import RawSalesInput
from salespulse.analyzer.aggregation_engine import filter_records
from salespulse.analyzer.pipeline import resolve_period
from salespulse.services.sales_service import SalesService, UnknownBranchError
from salespulse.store.record_store import RecordStore
from salespulse.core.logging import get_logger

logger = get_logger("api.sales")

router = APIRouter(prefix="/sales", tags=["Sales"])


# ── Request Models ──


class SubmitSalesRequest(RawSalesInput):
    """Request body for POST /sales."""

    branch: str
    """Configured branch code."""
    sales_date: date
    """Trading day in YYYY-MM-DD format."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "branch": "BKK01",
                    "sales_date": "2024-03-01",
                    "target_sales": 45000,
                    "in_store_sales": 21000,
                    "ta_sales": 4000,
                    "grab_sales": 12500,
                    "line_man_sales": 9800,
                    "num_bills": 130,
                    "num_customers": 310,
                    "target_everest_per_bill": 350,
                    "target_everest_per_head": 150,
                }
            ]
        }
    }


def require_branch_filter(branch: str, config: Settings) -> str:
    """Reject branch filters that are neither configured nor All."""
    if not config.is_valid_branch_filter(branch):
        raise HTTPException(
            status_code=400,
            detail=f"Unknown branch '{branch}'. Use one of: "
            f"{', '.join([ALL_BRANCHES, *config.branch_codes])}",
        )
    return branch


# ── Endpoints ──


@router.post("")
async def submit_sales(
    request: SubmitSalesRequest,
    store: RecordStore = Depends(get_record_store),
    config: Settings = Depends(get_settings),
):
    """Record one branch-day of sales. Re-submitting the same day replaces it."""
    service = SalesService(store, config)
    try:
        record = service.submit(request.branch, request.sales_date, request)
    except UnknownBranchError as e:
        logger.warning(str(e), extra={"branch": request.branch, "status_code": 400})
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "record": record.model_dump(mode="json")}


@router.get("")
async def list_sales(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    branch: str = Query(ALL_BRANCHES),
    store: RecordStore = Depends(get_record_store),
    config: Settings = Depends(get_settings),
):
    """Records of one period, oldest first."""
    require_branch_filter(branch, config)
    month, year = resolve_period(month, year)
    records = filter_records(store.current_snapshot(), month, year, branch)
    return {
        "status": "success" if records else "no_data",
        "month": month,
        "year": year,
        "branch": branch,
        "count": len(records),
        "records": [r.model_dump(mode="json") for r in records],
    }


@router.get("/{branch}/{sales_date}")
async def get_sales(
    branch: str,
    sales_date: date,
    store: RecordStore = Depends(get_record_store),
):
    """Fetch the record for one branch-day."""
    record = store.get(branch, sales_date)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail=f"No sales recorded for {branch} on {sales_date.isoformat()}",
        )
    return {"status": "success", "record": record.model_dump(mode="json")}
