"""SalesPulse — Daily Sales Record Models.

One SalesRecord per branch per day. Raw fields are whatever the operator
entered; derived fields are only ever written by the metrics engine.
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel, Field, UniqueConstraint

from salespulse.core.metric_registry import RAW_FIELDS, DERIVED_METRICS


def _safe_float(value: Any) -> float:
    """Safely convert a value to a finite float, 0.0 otherwise."""
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def make_record_key(branch: str, sales_date: date) -> str:
    """Composite store key, e.g. ``BKK01-2024-03-01``."""
    return f"{branch}-{sales_date.isoformat()}"


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Operator input and computed figures
# ─────────────────────────────────────────────


class RawSalesInput(BaseModel):
    """Numbers entered on the daily sales form.

    Missing or non-numeric values become 0. Negative values pass through.
    """

    target_sales: float = 0.0
    in_store_sales: float = 0.0
    ta_sales: float = 0.0
    grab_sales: float = 0.0
    line_man_sales: float = 0.0
    num_bills: float = 0.0
    num_customers: float = 0.0
    target_everest_per_bill: float = 0.0
    target_everest_per_head: float = 0.0

    @field_validator(*RAW_FIELDS, mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float:
        return _safe_float(value)


class DerivedMetrics(BaseModel):
    """Figures computed from a RawSalesInput."""

    total_sales: float = 0.0
    sales_difference: float = 0.0
    sales_percentage: float = 0.0
    everest_per_bill: float = 0.0
    everest_per_bill_difference: float = 0.0
    everest_per_bill_percentage: float = 0.0
    everest_per_head: float = 0.0
    everest_per_head_difference: float = 0.0
    everest_per_head_percentage: float = 0.0


# ─────────────────────────────────────────────
# DATABASE MODEL — Upserted by (app_id, branch, sales_date)
# ─────────────────────────────────────────────


class SalesRecord(SQLModel, table=True):
    """A branch's sales for one calendar day."""

    __tablename__ = "sales_records"
    __table_args__ = (
        UniqueConstraint("app_id", "branch", "sales_date", name="uq_sales_record"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    app_id: str = Field(default="", index=True, description="Tenant identifier")
    branch: str = Field(index=True, description="Configured branch code")
    sales_date: date = Field(index=True)
    record_key: str = Field(index=True, description="branch-YYYY-MM-DD")

    # Raw
    target_sales: float = 0.0
    in_store_sales: float = 0.0
    ta_sales: float = 0.0
    grab_sales: float = 0.0
    line_man_sales: float = 0.0
    num_bills: float = 0.0
    num_customers: float = 0.0
    target_everest_per_bill: float = 0.0
    target_everest_per_head: float = 0.0

    # Derived
    total_sales: float = 0.0
    sales_difference: float = 0.0
    sales_percentage: float = 0.0
    everest_per_bill: float = 0.0
    everest_per_bill_difference: float = 0.0
    everest_per_bill_percentage: float = 0.0
    everest_per_head: float = 0.0
    everest_per_head_difference: float = 0.0
    everest_per_head_percentage: float = 0.0

    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def raw_input(self) -> RawSalesInput:
        return RawSalesInput(**{name: getattr(self, name) for name in RAW_FIELDS})

    def copy_figures_from(self, other: "SalesRecord") -> None:
        """Overwrite raw, derived and timestamp fields with another record's."""
        for name in (*RAW_FIELDS, *DERIVED_METRICS):
            setattr(self, name, getattr(other, name))
        self.last_updated = other.last_updated
