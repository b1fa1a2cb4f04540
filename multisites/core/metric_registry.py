"""MultiSites - Metric Catalog.

Defines the metrics reported for every site and the archive records they
are read from. The catalog is rebuilt per request from two flags, so goal
and ecommerce metrics only appear when the caller asks for them.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping


@dataclass(frozen=True)
class MetricDefinition:
    """Describes a single reported metric."""

    name: str
    translation_key: str
    evolution_column_name: str
    record_name: str
    is_ecommerce: bool = False

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.record_name})>"


# ─────────────────────────────────────────────
# METRIC NAMES
# ─────────────────────────────────────────────

NB_VISITS_METRIC = "nb_visits"
NB_ACTIONS_METRIC = "nb_actions"
NB_PAGEVIEWS_LABEL = "nb_pageviews"
NB_PAGEVIEWS_METRIC = "Actions_nb_pageviews"
GOAL_REVENUE_METRIC = "revenue"
GOAL_CONVERSION_METRIC = "nb_conversions"
ECOMMERCE_ORDERS_METRIC = "orders"
ECOMMERCE_REVENUE_METRIC = "ecommerce_revenue"

# Goal id under which ecommerce orders are archived
ECOMMERCE_ORDER_GOAL_ID = 0


def goal_record_name(name: str, id_goal: int | None = None) -> str:
    """Archive record name of a goal metric, optionally for a single goal."""
    if id_goal is None:
        return f"Goal_{name}"
    return f"Goal_{id_goal}_{name}"


# ─────────────────────────────────────────────
# BASE METRICS - Always reported
# ─────────────────────────────────────────────

BASE_METRICS: Dict[str, MetricDefinition] = {
    NB_VISITS_METRIC: MetricDefinition(
        NB_VISITS_METRIC, "General_ColumnNbVisits", "visits_evolution", NB_VISITS_METRIC
    ),
    NB_ACTIONS_METRIC: MetricDefinition(
        NB_ACTIONS_METRIC,
        "General_ColumnNbActions",
        "actions_evolution",
        NB_ACTIONS_METRIC,
    ),
    NB_PAGEVIEWS_LABEL: MetricDefinition(
        NB_PAGEVIEWS_LABEL,
        "General_ColumnPageviews",
        "pageviews_evolution",
        NB_PAGEVIEWS_METRIC,
    ),
}


# ─────────────────────────────────────────────
# BUILDER
# ─────────────────────────────────────────────


def build_catalog(enhanced: bool, goals_enabled: bool) -> Mapping[str, MetricDefinition]:
    """Build the ordered, read-only metric catalog for one request.

    Entry order is the default column order of the report.
    """
    metrics: Dict[str, MetricDefinition] = dict(BASE_METRICS)

    if goals_enabled:
        metrics[GOAL_REVENUE_METRIC] = MetricDefinition(
            GOAL_REVENUE_METRIC,
            "Goals_ColumnRevenue",
            f"{GOAL_REVENUE_METRIC}_evolution",
            goal_record_name(GOAL_REVENUE_METRIC),
        )

        if enhanced:
            metrics[GOAL_CONVERSION_METRIC] = MetricDefinition(
                GOAL_CONVERSION_METRIC,
                "Goals_ColumnConversions",
                f"{GOAL_CONVERSION_METRIC}_evolution",
                goal_record_name(GOAL_CONVERSION_METRIC),
            )
            metrics[ECOMMERCE_ORDERS_METRIC] = MetricDefinition(
                ECOMMERCE_ORDERS_METRIC,
                "General_EcommerceOrders",
                f"{ECOMMERCE_ORDERS_METRIC}_evolution",
                goal_record_name(GOAL_CONVERSION_METRIC, ECOMMERCE_ORDER_GOAL_ID),
                is_ecommerce=True,
            )
            metrics[ECOMMERCE_REVENUE_METRIC] = MetricDefinition(
                ECOMMERCE_REVENUE_METRIC,
                "General_ProductRevenue",
                f"{ECOMMERCE_REVENUE_METRIC}_evolution",
                goal_record_name(GOAL_REVENUE_METRIC, ECOMMERCE_ORDER_GOAL_ID),
                is_ecommerce=True,
            )

    return MappingProxyType(metrics)


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────


def record_names(catalog: Mapping[str, MetricDefinition]) -> List[str]:
    """Archive fields to request, in catalog order."""
    return [m.record_name for m in catalog.values()]


def record_name_rewrites(catalog: Mapping[str, MetricDefinition]) -> Dict[str, str]:
    """Map of record name → public metric name."""
    return {m.record_name: name for name, m in catalog.items()}


def ecommerce_metrics(
    catalog: Mapping[str, MetricDefinition],
) -> List[MetricDefinition]:
    """Return the ecommerce-only metrics of a catalog."""
    return [m for m in catalog.values() if m.is_ecommerce]


def total_metadata_name(name: str) -> str:
    return f"total_{name}"


def last_period_metadata_name(name: str) -> str:
    return f"last_period_{name}"
