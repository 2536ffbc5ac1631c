"""SalesPulse — Configuration API Routes."""

from fastapi import APIRouter, Depends

from salespulse.config import Settings, get_settings
from salespulse.models.analysis_models import ALL_BRANCHES

router = APIRouter(prefix="/config", tags=["Config"])


@router.get("/branches")
async def get_branches(config: Settings = Depends(get_settings)):
    """Branch codes accepted by POST /sales and the filters accepted by reports."""
    return {
        "status": "success",
        "app_id": config.app_id,
        "branches": config.branch_codes,
        "all_sentinel": ALL_BRANCHES,
        "currency": config.currency,
    }
