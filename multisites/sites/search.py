"""MultiSites - Site Search."""

from abc import ABC, abstractmethod
from typing import List

from sqlalchemy import or_
from sqlmodel import Session, select

from multisites.config import settings
from multisites.models.site_models import Site


class SiteSearch(ABC):
    """Abstract site lookup by name, URL or id pattern."""

    @abstractmethod
    def match_pattern(self, pattern: str) -> List[dict]:
        """Return ordered {"idsite", "name"} dicts of the matching sites."""
        ...


class SqlSiteSearch(SiteSearch):
    """Matches sites whose name or main URL contains the pattern, or whose id equals it."""

    def __init__(self, session: Session, limit: int | None = None):
        self.session = session
        self.limit = limit if limit is not None else settings.site_search_limit

    def match_pattern(self, pattern: str) -> List[dict]:
        like = f"%{pattern}%"
        conditions = [Site.name.like(like), Site.main_url.like(like)]  # type: ignore
        if pattern.strip().isdigit():
            conditions.append(Site.idsite == int(pattern.strip()))

        sites = self.session.exec(
            select(Site).where(or_(*conditions)).order_by(Site.idsite).limit(self.limit)
        ).all()
        return [{"idsite": s.idsite, "name": s.name} for s in sites]
