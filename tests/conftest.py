"""Shared fixtures: in-memory database seeded with three sites."""

import os

os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date

import pytest
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from multisites.archive.sql_reader import SqlArchiveReader
from multisites.core.periods import PeriodMath
from multisites.models.archive_models import ArchivedMetric
from multisites.models.site_models import Site, SiteAccess, User
from multisites.reporting.pipeline import MultiSitesReporter
from multisites.sites.directory import SqlSiteDirectory
from multisites.sites.search import SqlSiteSearch

TODAY = date(2024, 1, 16)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def add_archive(session):
    """Store archived records: add_archive(idsite, period, date, nb_visits=3, ...)."""

    def _add(idsite, period, day, segment="", **records):
        for record_name, value in records.items():
            session.add(
                ArchivedMetric(
                    idsite=idsite,
                    period=period,
                    date=day,
                    segment=segment,
                    record_name=record_name,
                    value=value,
                )
            )
        session.commit()

    return _add


@pytest.fixture
def seeded(session, add_archive):
    """Three sites; only "Alpha Shop" tracks ecommerce.

    2024-01-15: Alpha 75 visits, Beta 20, Gamma none.
    2024-01-14: Alpha 50 visits, Beta none, Gamma 4.
    """
    session.add(Site(idsite=1, name="Alpha Shop", main_url="https://alpha.example", ecommerce=True))
    session.add(Site(idsite=2, name="Beta Blog", main_url="https://beta.example"))
    session.add(Site(idsite=3, name="Gamma Docs", main_url="https://docs.gamma.example"))
    session.add(User(login="root", superuser_access=True))
    session.add(User(login="alice"))
    session.commit()
    session.add(SiteAccess(login="alice", idsite=1, access="view"))
    session.add(SiteAccess(login="alice", idsite=2, access="admin"))
    session.commit()

    add_archive(
        1, "day", "2024-01-15",
        nb_visits=75, nb_actions=150, Actions_nb_pageviews=120,
        Goal_revenue=300, Goal_nb_conversions=6,
        Goal_0_nb_conversions=4, Goal_0_revenue=250,
    )
    add_archive(
        2, "day", "2024-01-15",
        nb_visits=20, nb_actions=30, Actions_nb_pageviews=25, Goal_nb_conversions=1,
    )
    add_archive(
        1, "day", "2024-01-14",
        nb_visits=50, nb_actions=100, Actions_nb_pageviews=100,
        Goal_revenue=200, Goal_nb_conversions=3,
        Goal_0_nb_conversions=2, Goal_0_revenue=100,
    )
    add_archive(3, "day", "2024-01-14", nb_visits=4, nb_actions=4, Actions_nb_pageviews=4)
    return session


@pytest.fixture
def period_math():
    return PeriodMath(today=TODAY)


@pytest.fixture
def reporter(seeded, period_math):
    return MultiSitesReporter(
        archive_reader=SqlArchiveReader(seeded, period_math),
        site_directory=SqlSiteDirectory(seeded),
        site_search=SqlSiteSearch(seeded),
        period_math=period_math,
        goals_enabled=True,
    )
