"""SalesPulse — Analysis Output Models (Versioned)."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel, Field

# Distinguished branch filter value: no branch restriction
ALL_BRANCHES = "All"

# ── Heuristic defaults (business policy) ──
MIN_TREND_RECORDS = 2
TREND_INCREASE_RATIO = 1.1
TREND_DECREASE_RATIO = 0.9
EXCELLENT_PCT = 10.0
AT_TARGET_PCT = 0.0
SLIGHTLY_BELOW_PCT = -10.0
DELIVERY_SHARE_THRESHOLD = 0.3
IN_STORE_SHARE_THRESHOLD = 0.5


# ─────────────────────────────────────────────
# DATABASE MODEL — Stores versioned period reports
# ─────────────────────────────────────────────


class PeriodReportResult(SQLModel, table=True):
    """Versioned period analysis stored in DB."""

    __tablename__ = "period_reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    schema_version: str = Field(description="e.g. 1.0.0")
    app_id: str = Field(default="", index=True)
    month: int = Field(index=True)
    year: int = Field(index=True)
    branch: str = Field(default=ALL_BRANCHES, index=True)
    result_json: str = Field(description="Full PeriodAnalysis as JSON")


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Period summary
# ─────────────────────────────────────────────


class SummaryStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"


class ChannelBreakdown(BaseModel):
    """Per-channel sums over a period."""

    in_store_sales: float = 0.0
    ta_sales: float = 0.0
    grab_sales: float = 0.0
    line_man_sales: float = 0.0


class ChannelShare(BaseModel):
    """One slice of the channel mix. Zero-sum channels are never emitted.

    `share_pct` is taken of the signed channel total, so a period holding
    negative channel figures (refunds) can show a share above 100 or below 0.
    """

    channel: str
    label: str
    value: float
    share_pct: float


class DailyPoint(BaseModel):
    """Chart-ready point; one per calendar day."""

    sales_date: date
    total_sales: float
    target_sales: float


class PeriodSummary(BaseModel):
    """Aggregated totals for a month, year and branch filter."""

    month: int
    year: int
    branch: str = ALL_BRANCHES
    status: SummaryStatus = SummaryStatus.NO_DATA
    record_count: int = 0
    monthly_total_sales: float = 0.0
    monthly_target_sales: float = 0.0
    monthly_sales_difference: float = 0.0
    monthly_sales_percentage: float = 0.0
    monthly_num_bills: float = 0.0
    monthly_num_customers: float = 0.0
    monthly_everest_per_bill: float = 0.0
    monthly_everest_per_head: float = 0.0
    channels: ChannelBreakdown = ChannelBreakdown()
    channel_shares: List[ChannelShare] = []
    daily_series: List[DailyPoint] = []

    @property
    def has_data(self) -> bool:
        return self.status == SummaryStatus.OK


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Trend report
# ─────────────────────────────────────────────


class TrendThresholds(BaseModel):
    """Cut-offs used by the trend engine."""

    min_records: int = MIN_TREND_RECORDS
    increase_ratio: float = TREND_INCREASE_RATIO
    decrease_ratio: float = TREND_DECREASE_RATIO
    excellent_pct: float = EXCELLENT_PCT
    at_target_pct: float = AT_TARGET_PCT
    slightly_below_pct: float = SLIGHTLY_BELOW_PCT
    delivery_share: float = DELIVERY_SHARE_THRESHOLD
    in_store_share: float = IN_STORE_SHARE_THRESHOLD

    @field_validator("min_records")
    @classmethod
    def _at_least_two(cls, value: int) -> int:
        # Both halves of the split must be non-empty
        if value < 2:
            raise ValueError("min_records must be at least 2")
        return value


class ReportStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class PerformanceBand(str, Enum):
    EXCELLENT = "excellent, well above target"
    AT_TARGET = "at target"
    SLIGHTLY_BELOW = "slightly below target"
    SIGNIFICANTLY_BELOW = "significantly below target"


class ChannelInsight(str, Enum):
    DELIVERY_GROWTH = "delivery_growth"
    IN_STORE_DOMINANCE = "in_store_dominance"


class DayExtreme(BaseModel):
    """The best or worst record of a period."""

    sales_date: date
    branch: str
    total_sales: float


class TrendReport(BaseModel):
    """Trend classification plus the narrative built from it."""

    status: ReportStatus = ReportStatus.OK
    record_count: int = 0
    trend: Optional[TrendDirection] = None
    first_half_avg: float = 0.0
    second_half_avg: float = 0.0
    performance_band: Optional[PerformanceBand] = None
    channel_insight: Optional[ChannelInsight] = None
    max_day: Optional[DayExtreme] = None
    min_day: Optional[DayExtreme] = None
    insights: List[str] = []
    narrative: str = ""


class PeriodAnalysis(BaseModel):
    """SalesPulse period output — summary and trend report together."""

    schema_version: str = "1.0.0"
    generated_at: str = ""
    currency: str = "THB"
    summary: PeriodSummary
    report: TrendReport
