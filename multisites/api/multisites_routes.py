"""MultiSites - Report API Routes."""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlmodel import Session, select

from multisites.archive.base_reader import ArchiveUnavailable
from multisites.archive.sql_reader import SqlArchiveReader
from multisites.core.periods import InvalidPeriod
from multisites.database import get_session
from multisites.models.archive_models import ReportSnapshot
from multisites.models.report_models import Caller
from multisites.reporting.pipeline import MultiSitesReporter
from multisites.sites.directory import SqlSiteDirectory, UnknownSite
from multisites.sites.search import SqlSiteSearch
from multisites.core.logging import get_logger

logger = get_logger("api.multisites")

router = APIRouter(prefix="/multisites", tags=["MultiSites"])


# ── Dependencies ──


def get_reporter(session: Session = Depends(get_session)) -> MultiSitesReporter:
    """Reporter wired to the SQL archive and site directory."""
    return MultiSitesReporter(
        archive_reader=SqlArchiveReader(session),
        site_directory=SqlSiteDirectory(session),
        site_search=SqlSiteSearch(session),
    )


def get_caller(
    x_login: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Caller:
    return Caller(
        login=x_login,
        is_super_user=SqlSiteDirectory(session).is_super_user(x_login),
    )


def _run(endpoint: str, build):
    """Run a report builder, mapping known failures to HTTP errors."""
    try:
        report = build()
    except InvalidPeriod as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownSite as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ArchiveUnavailable as e:
        logger.error(f"Archive unavailable: {e}", extra={"endpoint": endpoint, "status_code": 503})
        raise HTTPException(status_code=503, detail="Archive storage unavailable")
    return {"status": "success", "report": report.model_dump()}


# ── Endpoints ──


@router.get("/all")
async def get_all_sites(
    period: str = Query(..., description="day | week | month | year | range"),
    date: str = Query(..., description="YYYY-MM-DD, today, yesterday, lastN or start,end"),
    segment: Optional[str] = Query(None),
    enhanced: bool = Query(False, description="Include goal and ecommerce metrics"),
    pattern: Optional[str] = Query(None, description="Only sites whose name, URL or id match"),
    restrict_to_login: Optional[str] = Query(None),
    reporter: MultiSitesReporter = Depends(get_reporter),
    caller: Caller = Depends(get_caller),
):
    """Visits, actions, pageviews and revenue of every site, with evolution."""
    return _run(
        "multisites.all",
        lambda: reporter.get_all_sites_report(
            period=period,
            date=date,
            segment=segment,
            restrict_to_login=restrict_to_login,
            enhanced=enhanced,
            pattern=pattern,
            caller=caller,
        ),
    )


@router.get("/sites/{id_site}")
async def get_one_site(
    id_site: int,
    period: str = Query(...),
    date: str = Query(...),
    segment: Optional[str] = Query(None),
    enhanced: bool = Query(False),
    restrict_to_login: Optional[str] = Query(None),
    reporter: MultiSitesReporter = Depends(get_reporter),
    caller: Caller = Depends(get_caller),
):
    """Same report as /all, for a single site."""

    def build():
        reporter.site_directory.display_name(id_site)  # raises UnknownSite
        return reporter.get_one_site_report(
            id_site=id_site,
            period=period,
            date=date,
            segment=segment,
            restrict_to_login=restrict_to_login,
            enhanced=enhanced,
            caller=caller,
        )

    return _run("multisites.one", build)


@router.get("/snapshots/latest")
async def get_latest_snapshot(session: Session = Depends(get_session)):
    """Most recent all-sites report stored by the scheduler."""
    snapshot = session.exec(
        select(ReportSnapshot)
        .order_by(ReportSnapshot.created_at.desc())  # type: ignore
        .limit(1)
    ).first()

    if not snapshot:
        return {"status": "no_data", "message": "No snapshot has been stored yet."}

    return {
        "status": "success",
        "id": snapshot.id,
        "created_at": snapshot.created_at.isoformat(),
        "period": snapshot.period,
        "date": snapshot.date,
        "report": json.loads(snapshot.result_json),
    }
