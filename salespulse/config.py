"""SalesPulse — Central Configuration via Pydantic Settings."""

import os
from typing import List
from pydantic_settings import BaseSettings

from salespulse.models.analysis_models import ALL_BRANCHES, TrendThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Tenant ──
    app_id: str = "salespulse"
    branch_codes: List[str] = ["BKK01", "BKK02", "BKK03", "CNX01", "HKT01"]

    # ── Database ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    report_hour: int = 1  # Nightly report at 1 AM

    # ── Analysis ──
    report_schema_version: str = "1.0.0"
    currency: str = "THB"
    trend_thresholds: TrendThresholds = TrendThresholds()

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/salespulse.db"
        return "sqlite:///./salespulse.db"

    def is_known_branch(self, branch: str) -> bool:
        return branch in self.branch_codes

    def is_valid_branch_filter(self, branch: str) -> bool:
        """A configured branch code or the All sentinel."""
        return branch == ALL_BRANCHES or self.is_known_branch(branch)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
    }


settings = Settings()


def get_settings() -> Settings:
    """Dependency — the loaded settings."""
    return settings
