"""SalesPulse — Trend Engine.

Reads the date-ascending records of a period plus its PeriodSummary and
produces a TrendReport:
- trajectory: second-half vs first-half average of daily total sales
- performance band from the period's % vs target
- channel insight (delivery growth / in-store dominance), when one applies
- best and weakest day
The facts are kept as structured fields; `narrative` joins their sentences.
"""

from typing import List, Optional, Sequence

from salespulse.core.metric_registry import delivery_channel_fields
from salespulse.models.sales_models import SalesRecord
from salespulse.models.analysis_models import (
    ChannelInsight,
    DayExtreme,
    PerformanceBand,
    PeriodSummary,
    ReportStatus,
    TrendDirection,
    TrendReport,
    TrendThresholds,
)
from salespulse.core.logging import get_logger, period_extra

logger = get_logger("analyzer.trend")

INSUFFICIENT_DATA_MESSAGE = (
    "Not enough data to identify a trend. At least two days of sales are needed."
)

DEFAULT_THRESHOLDS = TrendThresholds()


def _average(values: List[float]) -> float:
    return sum(values) / len(values)


def classify_trajectory(
    records: Sequence[SalesRecord],
    thresholds: TrendThresholds = DEFAULT_THRESHOLDS,
) -> tuple[TrendDirection, float, float]:
    """Compare average total sales of the two halves of the period.

    The split is at n // 2, so for odd n the second half is the longer one.
    """
    mid = len(records) // 2
    first_avg = _average([r.total_sales for r in records[:mid]])
    second_avg = _average([r.total_sales for r in records[mid:]])

    if second_avg > first_avg * thresholds.increase_ratio:
        direction = TrendDirection.INCREASING
    elif second_avg < first_avg * thresholds.decrease_ratio:
        direction = TrendDirection.DECREASING
    else:
        direction = TrendDirection.STABLE
    return direction, first_avg, second_avg


def performance_band(
    sales_percentage: float,
    thresholds: TrendThresholds = DEFAULT_THRESHOLDS,
) -> PerformanceBand:
    if sales_percentage >= thresholds.excellent_pct:
        return PerformanceBand.EXCELLENT
    if sales_percentage >= thresholds.at_target_pct:
        return PerformanceBand.AT_TARGET
    if sales_percentage >= thresholds.slightly_below_pct:
        return PerformanceBand.SLIGHTLY_BELOW
    return PerformanceBand.SIGNIFICANTLY_BELOW


def _delivery_sales(summary: PeriodSummary) -> float:
    return sum(getattr(summary.channels, name) for name in delivery_channel_fields())


def channel_insight(
    summary: PeriodSummary,
    thresholds: TrendThresholds = DEFAULT_THRESHOLDS,
) -> Optional[ChannelInsight]:
    in_store = summary.channels.in_store_sales
    delivery = _delivery_sales(summary)
    total = summary.monthly_total_sales

    if delivery > in_store and delivery > thresholds.delivery_share * total:
        return ChannelInsight.DELIVERY_GROWTH
    if in_store > thresholds.in_store_share * total:
        return ChannelInsight.IN_STORE_DOMINANCE
    return None


def find_extremes(records: Sequence[SalesRecord]) -> tuple[DayExtreme, DayExtreme]:
    """Best and weakest record by total sales.

    Strict comparisons: on ties the earliest record in the sequence wins.
    """
    best = worst = records[0]
    for r in records[1:]:
        if r.total_sales > best.total_sales:
            best = r
        if r.total_sales < worst.total_sales:
            worst = r
    return _extreme(best), _extreme(worst)


def _extreme(record: SalesRecord) -> DayExtreme:
    return DayExtreme(
        sales_date=record.sales_date,
        branch=record.branch,
        total_sales=record.total_sales,
    )


# ── Narrative ──


def _trajectory_sentence(
    direction: TrendDirection, first_avg: float, second_avg: float
) -> str:
    comparison = (
        f"the second half of the period averaged {second_avg:,.2f} per day "
        f"against {first_avg:,.2f} in the first half"
    )
    if direction == TrendDirection.INCREASING:
        return f"Sales are trending up: {comparison}."
    if direction == TrendDirection.DECREASING:
        return f"Sales are trending down: {comparison}."
    return f"Sales are stable: {comparison}."


def _band_sentence(band: PerformanceBand, sales_percentage: float) -> str:
    return f"Overall performance is {band.value} ({sales_percentage:+.2f}% vs target)."


def _channel_sentence(insight: ChannelInsight, summary: PeriodSummary) -> str:
    total = summary.monthly_total_sales
    if insight == ChannelInsight.DELIVERY_GROWTH:
        share = _delivery_sales(summary) / total * 100 if total != 0 else 0.0
        return (
            f"Delivery platforms bring in {share:.1f}% of sales, more than in-store; "
            f"delivery is the channel to grow."
        )
    share = summary.channels.in_store_sales / total * 100 if total != 0 else 0.0
    return f"In-store sales make up {share:.1f}% of sales; dine-in is carrying the business."


def _extremes_sentence(best: DayExtreme, worst: DayExtreme) -> str:
    return (
        f"Best day: {best.sales_date.isoformat()} ({best.branch}) with "
        f"{best.total_sales:,.2f}. Weakest day: {worst.sales_date.isoformat()} "
        f"({worst.branch}) with {worst.total_sales:,.2f}."
    )


def analyze(
    records: Sequence[SalesRecord],
    summary: PeriodSummary,
    thresholds: TrendThresholds = DEFAULT_THRESHOLDS,
) -> TrendReport:
    """Classify the trend of a filtered, date-ascending record set."""
    if len(records) < thresholds.min_records:
        logger.info(f"Trend skipped: {len(records)} records")
        return TrendReport(
            status=ReportStatus.INSUFFICIENT_DATA,
            record_count=len(records),
            insights=[INSUFFICIENT_DATA_MESSAGE],
            narrative=INSUFFICIENT_DATA_MESSAGE,
        )

    direction, first_avg, second_avg = classify_trajectory(records, thresholds)
    band = performance_band(summary.monthly_sales_percentage, thresholds)
    insight = channel_insight(summary, thresholds)
    best, worst = find_extremes(records)

    insights = [
        _trajectory_sentence(direction, first_avg, second_avg),
        _band_sentence(band, summary.monthly_sales_percentage),
    ]
    if insight is not None:
        insights.append(_channel_sentence(insight, summary))
    insights.append(_extremes_sentence(best, worst))

    logger.info(
        f"Trend for {len(records)} records: {direction.value}, {band.value}",
        extra=period_extra(summary.month, summary.year, summary.branch),
    )

    return TrendReport(
        status=ReportStatus.OK,
        record_count=len(records),
        trend=direction,
        first_half_avg=first_avg,
        second_half_avg=second_avg,
        performance_band=band,
        channel_insight=insight,
        max_day=best,
        min_day=worst,
        insights=insights,
        narrative=" ".join(insights),
    )
