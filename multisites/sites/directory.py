"""MultiSites - Site Directory.

Lists sites, resolves display names and ecommerce capability, and answers
which sites a login may view.
"""

from abc import ABC, abstractmethod
from typing import Optional

from sqlmodel import Session, select

from multisites.models.report_models import SiteSet
from multisites.models.site_models import Site, SiteAccess, User
from multisites.core.logging import get_logger

logger = get_logger("sites.directory")

ANONYMOUS_LOGIN = "anonymous"


class UnknownSite(LookupError):
    """Raised when a site id is not in the directory."""

    def __init__(self, idsite):
        self.idsite = idsite
        super().__init__(f"Unknown site id {idsite}")


class SiteDirectory(ABC):
    """Abstract site directory."""

    @abstractmethod
    def all_sites(self) -> SiteSet:
        """Every known site, ordered by id."""
        ...

    @abstractmethod
    def viewable_sites(self, login: Optional[str]) -> SiteSet:
        """Sites the login has at least view access to."""
        ...

    @abstractmethod
    def display_name(self, idsite: int) -> str: ...

    @abstractmethod
    def is_ecommerce_enabled(self, idsite: int) -> bool: ...

    @abstractmethod
    def is_super_user(self, login: Optional[str]) -> bool: ...


class SqlSiteDirectory(SiteDirectory):
    """Site directory backed by the `sites`, `site_access` and `users` tables."""

    def __init__(self, session: Session):
        self.session = session

    def _get(self, idsite) -> Site:
        try:
            site = self.session.get(Site, int(idsite))
        except (TypeError, ValueError):
            site = None
        if site is None:
            raise UnknownSite(idsite)
        return site

    def all_sites(self) -> SiteSet:
        ids = self.session.exec(select(Site.idsite).order_by(Site.idsite)).all()
        return SiteSet.of(ids)

    def viewable_sites(self, login: Optional[str]) -> SiteSet:
        if self.is_super_user(login):
            return self.all_sites()

        ids = self.session.exec(
            select(SiteAccess.idsite)
            .where(
                SiteAccess.login == (login or ANONYMOUS_LOGIN),
                SiteAccess.access.in_(("view", "admin")),  # type: ignore
            )
            .order_by(SiteAccess.idsite)
        ).all()
        logger.info(f"Login {login or ANONYMOUS_LOGIN} can view {len(ids)} sites")
        return SiteSet.of(ids)

    def display_name(self, idsite: int) -> str:
        return self._get(idsite).name

    def is_ecommerce_enabled(self, idsite: int) -> bool:
        return bool(self._get(idsite).ecommerce)

    def is_super_user(self, login: Optional[str]) -> bool:
        if not login:
            return False
        user = self.session.get(User, login)
        return bool(user and user.superuser_access)
