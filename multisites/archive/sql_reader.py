"""MultiSites - SQL Archive Reader.

Reads already-archived numeric records from the `archived_metrics` table
and shapes them into report tables.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from multisites.archive.base_reader import ArchiveReader, ArchiveUnavailable
from multisites.core.periods import PeriodMath
from multisites.models.archive_models import ArchivedMetric
from multisites.models.report_models import (
    DATE_KEY,
    SITE_KEY,
    GroupedReportTable,
    ReportData,
    ReportRow,
    ReportTable,
    SiteContext,
    SiteSet,
)
from multisites.core.logging import get_logger

logger = get_logger("archive.sql_reader")


class SqlArchiveReader(ArchiveReader):
    """Archive reader backed by the `archived_metrics` table."""

    def __init__(self, session: Session, period_math: PeriodMath | None = None):
        self.session = session
        self.period_math = period_math or PeriodMath()

    def _site_ids(self, sites: SiteSet, context: Optional[SiteContext]) -> List[int]:
        if not sites.all_sites:
            return list(sites.ids)
        if context is None:
            raise ValueError("Reading all sites requires a site context")
        return list(context.site_ids)

    def _load(
        self,
        site_ids: List[int],
        period: str,
        dates: List[str],
        segment: str,
        fields: List[str],
    ) -> Dict[Tuple[str, int, str], float]:
        """Load archived values keyed by (date, idsite, record_name)."""
        if not site_ids or not fields:
            return {}
        try:
            rows = self.session.exec(
                select(ArchivedMetric).where(
                    ArchivedMetric.idsite.in_(site_ids),  # type: ignore
                    ArchivedMetric.period == period,
                    ArchivedMetric.date.in_(dates),  # type: ignore
                    ArchivedMetric.segment == segment,
                    ArchivedMetric.record_name.in_(fields),  # type: ignore
                )
            ).all()
        except SQLAlchemyError as e:
            raise ArchiveUnavailable(f"Archive query failed: {e}") from e

        return {(r.date, r.idsite, r.record_name): r.value for r in rows}

    @staticmethod
    def _site_table(
        values: Dict[Tuple[str, int, str], float],
        date_key: str,
        idsite: int,
        fields: List[str],
    ) -> ReportTable:
        columns = {f: values.get((date_key, idsite, f), 0) for f in fields}
        return ReportTable(rows=[ReportRow(columns=columns)])

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
        site_ids = self._site_ids(sites, context)
        dates = self.period_math.expand(period, date)
        values = self._load(site_ids, period, dates, segment or "", fields)

        indexed_by_site = sites.all_sites or len(site_ids) > 1
        multi_period = self.period_math.is_multi_period(period, date)

        def for_date(date_key: str) -> ReportData:
            if indexed_by_site:
                by_site = GroupedReportTable(key_name=SITE_KEY)
                for idsite in site_ids:
                    by_site.add_table(idsite, self._site_table(values, date_key, idsite, fields))
                return by_site
            if not site_ids:
                return ReportTable()
            return self._site_table(values, date_key, site_ids[0], fields)

        logger.info(
            f"Read {len(values)} archived values for {len(site_ids)} sites, "
            f"{len(dates)} {period} periods",
            extra={"period": period, "date": date},
        )

        if not multi_period:
            return for_date(dates[0])

        by_date = GroupedReportTable(key_name=DATE_KEY)
        for date_key in dates:
            by_date.add_table(date_key, for_date(date_key))
        return by_date
