"""SalesPulse — Unified Metric Registry.

Defines the canonical set of daily sales metrics and their classifications.
The metrics engine, aggregation engine and trend engine all read channel
membership from here, so adding a sales channel is a registry change.
"""

from enum import Enum
from typing import Dict, List


class MetricType(str, Enum):
    """How a metric is categorised."""

    TARGET = "target"  # Operator-entered goals: target_sales, target EPB/EPH
    CHANNEL = "channel"  # Sales per origination path
    COUNT = "count"  # Bills, customers
    DERIVED = "derived"  # Computed by the metrics engine


class MetricDefinition:
    """Describes a single metric."""

    def __init__(
        self,
        name: str,
        metric_type: MetricType,
        unit: str = "",
        description: str = "",
        label: str = "",
        is_delivery: bool = False,
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description
        self.label = label or name
        self.is_delivery = is_delivery

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


# ─────────────────────────────────────────────
# RAW METRICS — Entered by the operator once per branch per day
# ─────────────────────────────────────────────

RAW_METRICS: Dict[str, MetricDefinition] = {
    # Targets
    "target_sales": MetricDefinition(
        "target_sales", MetricType.TARGET, "currency", "Sales goal for the day"
    ),
    "target_everest_per_bill": MetricDefinition(
        "target_everest_per_bill",
        MetricType.TARGET,
        "currency",
        "Goal for average sales per bill",
    ),
    "target_everest_per_head": MetricDefinition(
        "target_everest_per_head",
        MetricType.TARGET,
        "currency",
        "Goal for average sales per customer",
    ),
    # Channels
    "in_store_sales": MetricDefinition(
        "in_store_sales",
        MetricType.CHANNEL,
        "currency",
        "Dine-in sales",
        label="In-store",
    ),
    "ta_sales": MetricDefinition(
        "ta_sales",
        MetricType.CHANNEL,
        "currency",
        "Takeaway sales",
        label="Takeaway",
    ),
    "grab_sales": MetricDefinition(
        "grab_sales",
        MetricType.CHANNEL,
        "currency",
        "Grab delivery sales",
        label="Grab",
        is_delivery=True,
    ),
    "line_man_sales": MetricDefinition(
        "line_man_sales",
        MetricType.CHANNEL,
        "currency",
        "LINE MAN delivery sales",
        label="LINE MAN",
        is_delivery=True,
    ),
    # Counts
    "num_bills": MetricDefinition(
        "num_bills", MetricType.COUNT, "count", "Bills issued"
    ),
    "num_customers": MetricDefinition(
        "num_customers", MetricType.COUNT, "count", "Customers served"
    ),
}


# ─────────────────────────────────────────────
# DERIVED METRICS — Computed by the metrics engine
# ─────────────────────────────────────────────

DERIVED_METRICS: Dict[str, MetricDefinition] = {
    "total_sales": MetricDefinition(
        "total_sales", MetricType.DERIVED, "currency", "Sum of all channels"
    ),
    "sales_difference": MetricDefinition(
        "sales_difference", MetricType.DERIVED, "currency", "Total minus target"
    ),
    "sales_percentage": MetricDefinition(
        "sales_percentage", MetricType.DERIVED, "%", "Difference / target"
    ),
    "everest_per_bill": MetricDefinition(
        "everest_per_bill", MetricType.DERIVED, "currency", "Total / bills"
    ),
    "everest_per_bill_difference": MetricDefinition(
        "everest_per_bill_difference",
        MetricType.DERIVED,
        "currency",
        "EPB minus target EPB",
    ),
    "everest_per_bill_percentage": MetricDefinition(
        "everest_per_bill_percentage",
        MetricType.DERIVED,
        "%",
        "EPB difference / target EPB",
    ),
    "everest_per_head": MetricDefinition(
        "everest_per_head", MetricType.DERIVED, "currency", "Total / customers"
    ),
    "everest_per_head_difference": MetricDefinition(
        "everest_per_head_difference",
        MetricType.DERIVED,
        "currency",
        "EPH minus target EPH",
    ),
    "everest_per_head_percentage": MetricDefinition(
        "everest_per_head_percentage",
        MetricType.DERIVED,
        "%",
        "EPH difference / target EPH",
    ),
}


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

ALL_METRICS = {**RAW_METRICS, **DERIVED_METRICS}

RAW_FIELDS: tuple[str, ...] = tuple(RAW_METRICS)


def get_metric(name: str) -> MetricDefinition | None:
    """Look up a metric by name."""
    return ALL_METRICS.get(name)


def metrics_by_type(metric_type: MetricType) -> List[MetricDefinition]:
    """Return all metrics of a given type."""
    return [m for m in ALL_METRICS.values() if m.metric_type == metric_type]


def channel_fields() -> List[str]:
    """Channel field names in registry order."""
    return [m.name for m in metrics_by_type(MetricType.CHANNEL)]


def delivery_channel_fields() -> List[str]:
    """Channel field names served by delivery platforms."""
    return [m.name for m in metrics_by_type(MetricType.CHANNEL) if m.is_delivery]
