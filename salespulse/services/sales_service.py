"""SalesPulse — Sales Ingestion Service.

Accepts one branch-day of operator input, computes the derived figures and
upserts the record into the store.
"""

from datetime import date, datetime, timezone

from salespulse.config import Settings
from salespulse.analyzer.metrics_engine import RawLike, compute_sales_record
from salespulse.models.sales_models import SalesRecord
from salespulse.store.record_store import RecordStore
from salespulse.core.logging import get_logger

logger = get_logger("services.sales")


class UnknownBranchError(Exception):
    """Raised when a branch code is not in the configured branch list."""

    def __init__(self, branch: str, known: list[str]):
        self.branch = branch
        self.known = known
        super().__init__(
            f"Unknown branch '{branch}'. Expected one of: {', '.join(known)}"
        )


class SalesService:
    """Writes daily sales for the branches of one configured tenant."""

    def __init__(self, store: RecordStore, config: Settings):
        self.store = store
        self.config = config

    def submit(self, branch: str, sales_date: date, raw: RawLike) -> SalesRecord:
        """Compute and upsert the record for (branch, sales_date)."""
        if not self.config.is_known_branch(branch):
            raise UnknownBranchError(branch, self.config.branch_codes)

        record = compute_sales_record(
            raw,
            branch=branch,
            sales_date=sales_date,
            updated_at=datetime.now(timezone.utc),
            app_id=self.config.app_id,
        )
        stored = self.store.upsert(record)
        logger.info(
            f"Submitted {stored.record_key}: total {stored.total_sales:,.2f} "
            f"({stored.sales_percentage:+.2f}% vs target)",
            extra={"record_key": stored.record_key, "branch": branch},
        )
        return stored
