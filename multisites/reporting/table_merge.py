"""MultiSites - Table Merge Engine.

Collapses by-site results into one table per period, and carries the row
level transforms applied to finished reports (labels, renames, sorting,
row and column deletion). Every function accepts plain and grouped tables.
"""

from typing import Any, Callable, Dict, Iterable, Iterator

from multisites.models.report_models import (
    SITE_KEY,
    GroupedReportTable,
    ReportData,
    ReportRow,
    ReportTable,
    SiteSet,
)
from multisites.sites.directory import SiteDirectory

LABEL_COLUMN = "label"
IDSITE_METADATA = "idsite"


def iter_tables(data: ReportData) -> Iterator[ReportTable]:
    """Yield every plain table of a report, depth first, in order."""
    if isinstance(data, GroupedReportTable):
        for child in data.children():
            yield from iter_tables(child)
    else:
        yield data


def iter_rows(data: ReportData) -> Iterator[ReportRow]:
    for table in iter_tables(data):
        yield from table.rows


# ─────────────────────────────────────────────
# MERGE
# ─────────────────────────────────────────────


def merge_multi_site(data: ReportData) -> ReportData:
    """Collapse the by-site level of a report into flat tables.

    Rows keep the group order and get the site id as their label. Groups
    keyed by anything else (dates) are kept, with their children merged.
    """
    if not isinstance(data, GroupedReportTable):
        return data

    children = data.children()
    if data.key_name != SITE_KEY or any(isinstance(c, GroupedReportTable) for c in children):
        merged = GroupedReportTable(key_name=data.key_name, metadata=dict(data.metadata))
        for key, child in data.items():
            merged.add_table(key, merge_multi_site(child))
        return merged

    table = ReportTable(metadata=dict(data.metadata))
    for key, child in data.items():
        for row in child.rows:
            row.set_column(LABEL_COLUMN, int(key))
            table.add_row(row)
    return table


def attach_site_label(data: ReportData, site_set: SiteSet) -> None:
    """Label the row of a single-site table with its site id."""
    if isinstance(data, GroupedReportTable) or data.row_count == 0:
        return
    if not site_set.is_single:
        return
    data.first_row().set_column(LABEL_COLUMN, site_set.first)


def move_id_site_to_metadata(data: ReportData) -> None:
    """Copy each row's label (a site id) to the row's "idsite" metadata.

    Must run before `finalize_labels`, which overwrites the label.
    """
    for row in iter_rows(data):
        if row.has_column(LABEL_COLUMN):
            row.set_metadata(IDSITE_METADATA, row.get_column(LABEL_COLUMN))


def finalize_labels(data: ReportData, is_multi_site: bool, directory: SiteDirectory) -> None:
    """Show site names on multi-site reports; drop the label on single-site ones."""
    for row in iter_rows(data):
        if not row.has_column(LABEL_COLUMN):
            continue
        if is_multi_site:
            row.set_column(LABEL_COLUMN, directory.display_name(row.get_column(LABEL_COLUMN)))
        else:
            row.delete_column(LABEL_COLUMN)


# ─────────────────────────────────────────────
# ROW TRANSFORMS
# ─────────────────────────────────────────────


def rename_columns(data: ReportData, rewrites: Dict[str, str]) -> None:
    """Rename columns in place, keeping their position."""
    for row in iter_rows(data):
        row.columns = {rewrites.get(name, name): value for name, value in row.columns.items()}


def _numeric(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def sort_rows(data: ReportData, column: str, descending: bool = True) -> None:
    """Stable numeric sort of every table on one column."""
    for table in iter_tables(data):
        table.rows.sort(key=lambda r: _numeric(r.get_column(column)), reverse=descending)


def delete_rows(data: ReportData, column: str, should_delete: Callable[[Any], bool]) -> None:
    """Remove rows whose value in `column` matches the predicate."""
    for table in iter_tables(data):
        table.rows = [r for r in table.rows if not should_delete(r.get_column(column))]


def delete_columns(
    data: ReportData,
    names: Iterable[str],
    row_filter: Callable[[ReportRow], bool] = lambda row: True,
) -> None:
    """Delete the given columns from the rows accepted by `row_filter`."""
    names = list(names)
    for row in iter_rows(data):
        if row_filter(row):
            for name in names:
                row.delete_column(name)
