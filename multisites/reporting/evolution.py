"""MultiSites - Evolution Calculator.

Compares the current period against the previous one:
per-row evolution percentages, per-table totals and totals evolution.

Current and past data must have the same shape. Grouped tables are walked
pairwise by position, never by key.
"""

from typing import Any, Callable, Dict, Mapping

from multisites.core.metric_registry import (
    MetricDefinition,
    last_period_metadata_name,
    total_metadata_name,
)
from multisites.models.report_models import GroupedReportTable, ReportData, ReportRow, ReportTable
from multisites.reporting.table_merge import LABEL_COLUMN

Metrics = Mapping[str, MetricDefinition]


class ShapeMismatch(Exception):
    """Raised when current and past data are not structurally identical."""


def _value(raw: Any) -> float:
    if raw is None or raw == "":
        return 0
    return raw


def calculate(current: Any, past: Any, precision: int = 1) -> float:
    """Percentage change from `past` to `current`.

    Growth from zero counts as 100%; no change from zero is 0%.
    """
    current, past = _value(current), _value(past)
    if past == 0:
        return 100.0 if current != 0 else 0.0
    return round((current - past) / past * 100, precision)


# ─────────────────────────────────────────────
# SHAPE WALK
# ─────────────────────────────────────────────


def _check_shapes(current: ReportData, past: ReportData, path: str = "") -> None:
    if type(current) is not type(past):
        raise ShapeMismatch(
            f"Expected past data{path} to be {type(current).__name__}, "
            f"got {type(past).__name__}"
        )
    if isinstance(current, GroupedReportTable):
        if current.table_count != past.table_count:
            raise ShapeMismatch(
                f"Expected {current.table_count} past tables{path}, got {past.table_count}"
            )
        for index, (c, p) in enumerate(zip(current.children(), past.children())):
            _check_shapes(c, p, f"{path}[{index}]")


def _visit_pairs(
    current: ReportData,
    past: ReportData,
    visit: Callable[[ReportTable, ReportTable], None],
) -> None:
    """Validate both shapes, then call `visit` on each pair of plain tables."""
    _check_shapes(current, past)
    _walk(current, past, visit)


def _walk(current: ReportData, past: ReportData, visit) -> None:
    if isinstance(current, GroupedReportTable):
        for c, p in zip(current.children(), past.children()):
            _walk(c, p, visit)
    else:
        visit(current, past)


# ─────────────────────────────────────────────
# PER-ROW EVOLUTION
# ─────────────────────────────────────────────


def _past_row(row: ReportRow, index: int, past: ReportTable) -> ReportRow | None:
    if row.has_column(LABEL_COLUMN):
        return past.get_row_from_label(row.get_column(LABEL_COLUMN))
    if index < past.row_count:
        return past.rows[index]
    return None


def calculate_evolution(current: ReportData, past: ReportData, metrics: Metrics) -> None:
    """Add one evolution column per metric to every row of `current`.

    Rows are matched to past rows by label (site id), or by position when
    rows carry no label. A site missing from the past data counts as 0.

    Raises:
        ShapeMismatch: before touching `current` when the shapes differ.
    """

    def visit(current_table: ReportTable, past_table: ReportTable) -> None:
        for index, row in enumerate(current_table.rows):
            past_row = _past_row(row, index, past_table)
            for metric in metrics.values():
                past_value = past_row.get_column(metric.record_name) if past_row else 0
                row.set_column(
                    metric.evolution_column_name,
                    calculate(row.get_column(metric.record_name), past_value),
                )

    _visit_pairs(current, past, visit)


# ─────────────────────────────────────────────
# TOTALS
# ─────────────────────────────────────────────


def _table_totals(table: ReportTable, metrics: Metrics) -> Dict[str, float]:
    totals: Dict[str, float] = {name: 0 for name in metrics}
    for row in table.rows:
        for name, metric in metrics.items():
            totals[name] += _value(row.get_column(metric.record_name))
    for name, value in totals.items():
        table.set_metadata(total_metadata_name(name), value)
    return totals


def compute_totals(data: ReportData, metrics: Metrics) -> Dict[str, float]:
    """Store each metric's column sum as "total_<metric>" table metadata.

    Grouped data gets totals on every sub-table; the return value is then the
    grand total across them.
    """
    if not isinstance(data, GroupedReportTable):
        return _table_totals(data, metrics)

    grand: Dict[str, float] = {name: 0 for name in metrics}
    for child in data.children():
        for name, value in compute_totals(child, metrics).items():
            grand[name] += value
    return grand


def compute_totals_evolution(current: ReportData, past: ReportData, metrics: Metrics) -> None:
    """Compare totals of `current` against the totals of `past`.

    Sets "last_period_total_<metric>" and "total_<evolution column>" on
    every plain table of `current`. Totals of `current` must already be set.
    """

    def visit(current_table: ReportTable, past_table: ReportTable) -> None:
        past_totals = _table_totals(past_table, metrics)
        for name, metric in metrics.items():
            total_name = total_metadata_name(name)
            past_total = past_totals[name]
            current_table.set_metadata(last_period_metadata_name(total_name), past_total)
            current_table.set_metadata(
                total_metadata_name(metric.evolution_column_name),
                calculate(current_table.get_metadata(total_name), past_total),
            )

    _visit_pairs(current, past, visit)
