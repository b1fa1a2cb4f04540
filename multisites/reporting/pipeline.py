"""MultiSites - Report Pipeline.

Builds the all-sites and one-site reports:
  resolve sites → scope → catalog → fetch → merge → totals
  → past period → evolution → ecommerce filter → labels → rename → sort → filter

The order of the steps is fixed; several of them depend on the columns the
previous ones leave behind.
"""

import time
from typing import Optional

from multisites.archive.base_reader import ArchiveReader
from multisites.config import settings
from multisites.core.metric_registry import (
    NB_VISITS_METRIC,
    build_catalog,
    ecommerce_metrics,
    last_period_metadata_name,
    record_name_rewrites,
    record_names,
)
from multisites.core.periods import InvalidPeriod, PeriodMath
from multisites.models.report_models import (
    Caller,
    ReportData,
    ReportRow,
    ReportTable,
    SiteSet,
)
from multisites.reporting.evolution import (
    calculate_evolution,
    compute_totals,
    compute_totals_evolution,
)
from multisites.reporting.table_merge import (
    LABEL_COLUMN,
    attach_site_label,
    delete_columns,
    delete_rows,
    finalize_labels,
    iter_rows,
    iter_tables,
    merge_multi_site,
    move_id_site_to_metadata,
    rename_columns,
    sort_rows,
)
from multisites.sites.directory import SiteDirectory
from multisites.sites.resolver import prepare_site_context, resolve_sites
from multisites.sites.search import SiteSearch
from multisites.core.logging import get_logger

logger = get_logger("reporting.pipeline")


class MultiSitesReporter:
    """Key metrics (visits, actions, pageviews, revenue) for many sites at once."""

    def __init__(
        self,
        archive_reader: ArchiveReader,
        site_directory: SiteDirectory,
        site_search: SiteSearch,
        period_math: PeriodMath | None = None,
        goals_enabled: bool | None = None,
    ):
        self.archive_reader = archive_reader
        self.site_directory = site_directory
        self.site_search = site_search
        self.period_math = period_math or PeriodMath()
        self.goals_enabled = settings.goals_enabled if goals_enabled is None else goals_enabled

    # ── Public API ──

    def get_all_sites_report(
        self,
        period: str,
        date: str,
        segment: Optional[str] = None,
        restrict_to_login: Optional[str] = None,
        enhanced: bool = False,
        pattern: Optional[str] = None,
        caller: Optional[Caller] = None,
    ) -> ReportData:
        """Report with one row per site, optionally limited to sites matching `pattern`.

        Evolution columns are added whenever the period/date has a single
        comparable previous period. Sites without visits are dropped unless
        `enhanced` is set.
        """
        site_set = resolve_sites(pattern, self.site_search)
        if site_set.is_empty:
            logger.info(f"No site matches pattern '{pattern}', returning empty report")
            return ReportTable()

        return self._build_report(
            site_set, period, date, segment, restrict_to_login, enhanced,
            multiple_sites_requested=True, caller=caller or Caller(),
        )

    def get_one_site_report(
        self,
        id_site: int,
        period: str,
        date: str,
        segment: Optional[str] = None,
        restrict_to_login: Optional[str] = None,
        enhanced: bool = False,
        caller: Optional[Caller] = None,
    ) -> ReportData:
        """Same as `get_all_sites_report` for a single site.

        The row is always kept, even without visits.
        """
        return self._build_report(
            SiteSet.of([id_site]), period, date, segment, restrict_to_login, enhanced,
            multiple_sites_requested=False, caller=caller or Caller(),
        )

    # ── Pipeline ──

    def _fetch(self, site_set, period, date, segment, restrict_to_login, fields, context,
               multiple_sites_requested) -> ReportData:
        data = self.archive_reader.fetch_numeric(
            site_set, period, date, segment, restrict_to_login, fields, context
        )
        if not multiple_sites_requested:
            attach_site_label(data, site_set)
            return data

        # A pattern matching one site still needs the site id on every row
        data = merge_multi_site(data)
        for table in iter_tables(data):
            attach_site_label(table, site_set)
        return data

    def _prior_period(self, period: str, date: str):
        try:
            return self.period_math.prior_period(period, date)
        except InvalidPeriod as e:
            logger.warning(f"No previous period for {period} {date}: {e}")
            return None

    def _build_report(
        self,
        site_set: SiteSet,
        period: str,
        date: str,
        segment: Optional[str],
        restrict_to_login: Optional[str],
        enhanced: bool,
        multiple_sites_requested: bool,
        caller: Caller,
    ) -> ReportData:
        started = time.monotonic()

        context = prepare_site_context(
            site_set,
            restrict_to_login,
            caller.is_super_user,
            caller.is_scheduled_task,
            self.site_directory,
            login=caller.login,
        )

        catalog = build_catalog(enhanced, self.goals_enabled)
        fields = record_names(catalog)

        data = self._fetch(site_set, period, date, segment, restrict_to_login, fields,
                           context, multiple_sites_requested)

        compute_totals(data, catalog)

        prior = self._prior_period(period, date)
        if prior is not None:
            if prior.last_period is not None:
                data.set_metadata(last_period_metadata_name("date"), prior.last_period.isoformat())

            past_data = self._fetch(site_set, period, prior.date, segment, restrict_to_login,
                                    fields, context, multiple_sites_requested)

            calculate_evolution(data, past_data, catalog)
            compute_totals_evolution(data, past_data, catalog)

        if enhanced:
            self._drop_ecommerce_columns(data, catalog, site_set)

        move_id_site_to_metadata(data)
        finalize_labels(data, multiple_sites_requested, self.site_directory)
        rename_columns(data, record_name_rewrites(catalog))
        sort_rows(data, NB_VISITS_METRIC, descending=True)

        # Single-site reports always keep their row, even without visits
        if multiple_sites_requested and not enhanced:
            delete_rows(data, NB_VISITS_METRIC, lambda visits: visits == 0)

        rows = sum(1 for _ in iter_rows(data))
        logger.info(
            f"Built report for sites {site_set} ({rows} rows, evolution={prior is not None})",
            extra={
                "period": period,
                "date": date,
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
        return data

    def _drop_ecommerce_columns(self, data: ReportData, catalog, site_set: SiteSet) -> None:
        """Remove ecommerce metrics from rows of sites without ecommerce tracking."""
        columns = []
        for metric in ecommerce_metrics(catalog):
            columns += [metric.record_name, metric.evolution_column_name]
        if not columns:
            return

        # Rows of a single-site report broken down by period carry no label
        default_site = site_set.first if site_set.is_single else None

        def without_ecommerce(row: ReportRow) -> bool:
            idsite = row.get_column(LABEL_COLUMN, default_site)
            return idsite is not None and not self.site_directory.is_ecommerce_enabled(idsite)

        delete_columns(data, columns, without_ecommerce)
