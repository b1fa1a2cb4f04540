"""MultiSites - Report Table Models.

A report is either a plain `ReportTable` (one site or one merged set of
sites, for one period) or a `GroupedReportTable` whose children are keyed by
site id or by period. Every recursive operation accepts both through the
`ReportData` union.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

SITE_KEY = "idSite"
DATE_KEY = "date"


# ─────────────────────────────────────────────
# TABLES
# ─────────────────────────────────────────────


class ReportRow(BaseModel):
    """One row: column values plus row-level metadata."""

    columns: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def get_column(self, name: str, default: Any = None) -> Any:
        return self.columns.get(name, default)

    def set_column(self, name: str, value: Any) -> None:
        self.columns[name] = value

    def delete_column(self, name: str) -> None:
        self.columns.pop(name, None)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def get_metadata(self, name: str, default: Any = None) -> Any:
        return self.metadata.get(name, default)

    def set_metadata(self, name: str, value: Any) -> None:
        self.metadata[name] = value


class ReportTable(BaseModel):
    """Ordered rows plus table-level metadata (totals, last period date)."""

    rows: List[ReportRow] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_columns(cls, *rows: Dict[str, Any]) -> "ReportTable":
        """Build a table from plain column mappings."""
        return cls(rows=[ReportRow(columns=dict(r)) for r in rows])

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def first_row(self) -> Optional[ReportRow]:
        return self.rows[0] if self.rows else None

    def add_row(self, row: ReportRow) -> None:
        self.rows.append(row)

    def get_row_from_label(self, label: Any) -> Optional[ReportRow]:
        for row in self.rows:
            if row.get_column("label") == label:
                return row
        return None

    def get_metadata(self, name: str, default: Any = None) -> Any:
        return self.metadata.get(name, default)

    def set_metadata(self, name: str, value: Any) -> None:
        self.metadata[name] = value


class GroupedReportTable(BaseModel):
    """Ordered children keyed by site id or by period.

    Children may themselves be grouped (by date, then by site).
    """

    key_name: str = DATE_KEY
    tables: Dict[str, "ReportData"] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def table_count(self) -> int:
        return len(self.tables)

    def add_table(self, key: Any, table: "ReportData") -> None:
        self.tables[str(key)] = table

    def items(self) -> Iterator[Tuple[str, "ReportData"]]:
        return iter(self.tables.items())

    def children(self) -> List["ReportData"]:
        return list(self.tables.values())

    def get_metadata(self, name: str, default: Any = None) -> Any:
        return self.metadata.get(name, default)

    def set_metadata(self, name: str, value: Any) -> None:
        self.metadata[name] = value


ReportData = Union[ReportTable, GroupedReportTable]

GroupedReportTable.model_rebuild()


# ─────────────────────────────────────────────
# REQUEST SCOPE
# ─────────────────────────────────────────────


class SiteSet(BaseModel):
    """Either every site ("all") or an explicit ordered list of site ids."""

    model_config = {"frozen": True}

    all_sites: bool = False
    ids: Tuple[int, ...] = ()

    @classmethod
    def all(cls) -> "SiteSet":
        return cls(all_sites=True)

    @classmethod
    def of(cls, ids) -> "SiteSet":
        return cls(ids=tuple(int(i) for i in ids))

    @property
    def is_empty(self) -> bool:
        return not self.all_sites and not self.ids

    @property
    def is_single(self) -> bool:
        return not self.all_sites and len(self.ids) == 1

    @property
    def first(self) -> Optional[int]:
        return self.ids[0] if self.ids else None

    def __str__(self) -> str:
        return "all" if self.all_sites else ",".join(str(i) for i in self.ids)


class SiteContext(BaseModel):
    """Request-local list of sites the "all" sentinel stands for."""

    model_config = {"frozen": True}

    site_ids: Tuple[int, ...] = ()


class Caller(BaseModel):
    """Who is asking for a report."""

    model_config = {"frozen": True}

    login: Optional[str] = None
    is_super_user: bool = False
    is_scheduled_task: bool = False
