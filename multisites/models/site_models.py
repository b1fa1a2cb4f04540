"""MultiSites - Site Directory Models."""

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class Site(SQLModel, table=True):
    """A tracked website."""

    __tablename__ = "sites"

    idsite: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, description="Display name")
    main_url: str = Field(default="", description="Main URL of the site")
    ecommerce: bool = Field(default=False, description="Ecommerce tracking enabled")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SiteAccess(SQLModel, table=True):
    """Grants a login access to one site."""

    __tablename__ = "site_access"
    __table_args__ = (UniqueConstraint("login", "idsite", name="uq_site_access"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    login: str = Field(index=True)
    idsite: int = Field(index=True, foreign_key="sites.idsite")
    access: str = Field(default="view", description="view | admin")


class User(SQLModel, table=True):
    """A login known to the directory."""

    __tablename__ = "users"

    login: str = Field(primary_key=True)
    superuser_access: bool = Field(default=False)
