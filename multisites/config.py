"""MultiSites - Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Reporting ──
    goals_enabled: bool = True
    site_search_limit: int = 15  # Max sites returned by a name pattern

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    report_hour: int = 3  # Daily snapshot at 3 AM

    # ── Scheduled Snapshot ──
    scheduled_report_login: Optional[str] = None
    scheduled_report_period: str = "day"
    scheduled_report_enhanced: bool = False

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/multisites.db"
        return "sqlite:///./multisites.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
