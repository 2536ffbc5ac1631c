"""SalesPulse — Aggregation Engine.

Filters a snapshot of sales records down to one month/year/branch, orders it
by date for time-series use, and sums it into a PeriodSummary.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List

from salespulse.core.metric_registry import channel_fields, get_metric
from salespulse.models.sales_models import SalesRecord
from salespulse.models.analysis_models import (
    ALL_BRANCHES,
    ChannelBreakdown,
    ChannelShare,
    DailyPoint,
    PeriodSummary,
    SummaryStatus,
)
from salespulse.core.logging import format_period, get_logger, period_extra

logger = get_logger("analyzer.aggregation")


def _matches(record: SalesRecord, month: int, year: int, branch: str) -> bool:
    return (
        record.sales_date.month == month
        and record.sales_date.year == year
        and (branch == ALL_BRANCHES or record.branch == branch)
    )


def filter_records(
    records: Iterable[SalesRecord],
    month: int,
    year: int,
    branch: str = ALL_BRANCHES,
) -> List[SalesRecord]:
    """Records in the period, date ascending regardless of feed order."""
    matched = [r for r in records if _matches(r, month, year, branch)]
    # Branch breaks same-day ties so "All" views are deterministic
    return sorted(matched, key=lambda r: (r.sales_date, r.branch))


def chart_series(records: Iterable[SalesRecord]) -> List[DailyPoint]:
    """One point per day; branches on the same day are summed."""
    totals: Dict[date, float] = defaultdict(float)
    targets: Dict[date, float] = defaultdict(float)
    for r in records:
        totals[r.sales_date] += r.total_sales
        targets[r.sales_date] += r.target_sales

    return [
        DailyPoint(sales_date=d, total_sales=totals[d], target_sales=targets[d])
        for d in sorted(totals)
    ]


def channel_breakdown(records: Iterable[SalesRecord]) -> ChannelBreakdown:
    sums: Dict[str, float] = defaultdict(float)
    for r in records:
        for name in channel_fields():
            sums[name] += getattr(r, name)
    return ChannelBreakdown(**sums)


def channel_shares(breakdown: ChannelBreakdown) -> List[ChannelShare]:
    """Channel mix slices, skipping channels whose sum is zero.

    Shares are of the signed channel total; they are not clamped.
    """
    values = {name: getattr(breakdown, name) for name in channel_fields()}
    channel_total = sum(values.values())

    shares: List[ChannelShare] = []
    for name, value in values.items():
        if value == 0:
            continue
        metric = get_metric(name)
        shares.append(
            ChannelShare(
                channel=name,
                label=metric.label if metric else name,
                value=value,
                share_pct=(value / channel_total * 100) if channel_total != 0 else 0.0,
            )
        )
    return shares


def summarize(
    filtered: List[SalesRecord],
    month: int,
    year: int,
    branch: str = ALL_BRANCHES,
) -> PeriodSummary:
    """Sum an already-filtered record set into a PeriodSummary."""
    if not filtered:
        logger.info(
            f"No records for {format_period(month, year)} ({branch})",
            extra=period_extra(month, year, branch),
        )
        return PeriodSummary(
            month=month, year=year, branch=branch, status=SummaryStatus.NO_DATA
        )

    total = sum(r.total_sales for r in filtered)
    target = sum(r.target_sales for r in filtered)
    bills = sum(r.num_bills for r in filtered)
    customers = sum(r.num_customers for r in filtered)
    difference = total - target
    breakdown = channel_breakdown(filtered)

    summary = PeriodSummary(
        month=month,
        year=year,
        branch=branch,
        status=SummaryStatus.OK,
        record_count=len(filtered),
        monthly_total_sales=total,
        monthly_target_sales=target,
        monthly_sales_difference=difference,
        monthly_sales_percentage=(difference / target * 100) if target != 0 else 0.0,
        monthly_num_bills=bills,
        monthly_num_customers=customers,
        monthly_everest_per_bill=(total / bills) if bills != 0 else 0.0,
        monthly_everest_per_head=(total / customers) if customers != 0 else 0.0,
        channels=breakdown,
        channel_shares=channel_shares(breakdown),
        daily_series=chart_series(filtered),
    )

    logger.info(
        f"Aggregated {len(filtered)} records for {format_period(month, year)} ({branch})",
        extra={**period_extra(month, year, branch), "record_count": len(filtered)},
    )
    return summary


def aggregate(
    records: Iterable[SalesRecord],
    month: int,
    year: int,
    branch: str = ALL_BRANCHES,
) -> PeriodSummary:
    """Filter a snapshot to the period and summarise it."""
    return summarize(filter_records(records, month, year, branch), month, year, branch)
