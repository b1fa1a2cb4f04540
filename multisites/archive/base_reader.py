"""MultiSites - Abstract Archive Reader."""

from abc import ABC, abstractmethod
from typing import List, Optional

from multisites.models.report_models import ReportData, SiteContext, SiteSet


class ArchiveUnavailable(Exception):
    """Raised when the archive storage cannot be read."""


class ArchiveReader(ABC):
    """Abstract access to archived numeric records.

    Shape of the returned data:
      - several sites (or "all")  → grouped by "idSite", one child per site
      - several periods           → grouped by "date", outermost
      - one site, one period      → plain table with a single row
    Values that were never archived are reported as 0.
    """

    @abstractmethod
    def fetch_numeric(
        self,
        sites: SiteSet,
        period: str,
        date: str,
        segment: Optional[str],
        restrict_to_login: Optional[str],
        fields: List[str],
        context: Optional[SiteContext] = None,
    ) -> ReportData:
        """Return the requested record names for every site and period.

        Args:
            sites: The sites to read; "all" expands to `context.site_ids`.
            period: day | week | month | year | range.
            date: Date expression (single date, range or lastN).
            segment: Segment definition, or None for all visits.
            restrict_to_login: Login the scheduled caller is restricted to.
            fields: Archive record names to read, in column order.
            context: Request-local site scope.
        """
        ...
