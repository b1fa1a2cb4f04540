"""MultiSites - Archive & Snapshot Models."""

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class ArchivedMetric(SQLModel, table=True):
    """One archived numeric record for a site, period and segment.

    Unique constraint on (idsite, period, date, segment, record_name)
    keeps one value per archive record.
    """

    __tablename__ = "archived_metrics"
    __table_args__ = (
        UniqueConstraint(
            "idsite",
            "period",
            "date",
            "segment",
            "record_name",
            name="uq_archived_metric",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    idsite: int = Field(index=True)
    period: str = Field(index=True, description="day | week | month | year | range")
    date: str = Field(index=True, description="Period start YYYY-MM-DD, or start,end")
    segment: str = Field(default="", description="Segment definition, empty for all")
    record_name: str = Field(index=True, description="e.g. nb_visits, Goal_revenue")
    value: float = Field(default=0, description="Numeric value")


class ReportSnapshot(SQLModel, table=True):
    """All-sites report produced by the scheduled job."""

    __tablename__ = "report_snapshots"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    period: str = Field(default="day")
    date: str = Field(default="", description="Date expression the report covers")
    restrict_to_login: Optional[str] = Field(default=None)
    result_json: str = Field(description="Full report as JSON")
