"""SalesPulse — Metrics Engine.

Turns one day's raw operator input into the derived figures stored on a
SalesRecord: total sales, difference and % vs target, and Everest Per Bill /
Per Head with their differences and % vs target.

Pure: no I/O, no clock reads. Every ratio with a zero denominator is 0.
"""

from datetime import date, datetime
from typing import Any, Mapping, Union

from salespulse.core.metric_registry import RAW_FIELDS, channel_fields
from salespulse.models.sales_models import (
    DerivedMetrics,
    RawSalesInput,
    SalesRecord,
    make_record_key,
)

RawLike = Union[RawSalesInput, Mapping[str, Any]]


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator != 0 else 0.0


def _pct_of(difference: float, target: float) -> float:
    return difference / target * 100 if target != 0 else 0.0


def _as_raw(raw: RawLike) -> RawSalesInput:
    if isinstance(raw, RawSalesInput):
        return raw
    return RawSalesInput(**{k: v for k, v in raw.items() if k in RAW_FIELDS})


def compute_derived_metrics(raw: RawLike) -> DerivedMetrics:
    """Compute all derived figures from raw input."""
    r = _as_raw(raw)

    total = sum(getattr(r, name) for name in channel_fields())
    difference = total - r.target_sales

    epb = _ratio(total, r.num_bills)
    epb_difference = epb - r.target_everest_per_bill

    eph = _ratio(total, r.num_customers)
    eph_difference = eph - r.target_everest_per_head

    return DerivedMetrics(
        total_sales=total,
        sales_difference=difference,
        sales_percentage=_pct_of(difference, r.target_sales),
        everest_per_bill=epb,
        everest_per_bill_difference=epb_difference,
        everest_per_bill_percentage=_pct_of(epb_difference, r.target_everest_per_bill),
        everest_per_head=eph,
        everest_per_head_difference=eph_difference,
        everest_per_head_percentage=_pct_of(eph_difference, r.target_everest_per_head),
    )


def compute_sales_record(
    raw: RawLike,
    branch: str,
    sales_date: date,
    updated_at: datetime,
    app_id: str = "",
) -> SalesRecord:
    """Build a complete SalesRecord for (branch, sales_date).

    ``updated_at`` is supplied by the caller so the result depends only on
    the arguments.
    """
    r = _as_raw(raw)
    derived = compute_derived_metrics(r)
    return SalesRecord(
        app_id=app_id,
        branch=branch,
        sales_date=sales_date,
        record_key=make_record_key(branch, sales_date),
        last_updated=updated_at,
        **r.model_dump(include=set(RAW_FIELDS)),
        **derived.model_dump(),
    )
