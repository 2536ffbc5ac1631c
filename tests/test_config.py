"""
Tests for settings and structured logging
"""

import json
import logging

from salespulse.config import Settings
from salespulse.core.logging import JSONFormatter, get_logger, period_extra
from salespulse.models.analysis_models import (
    TREND_DECREASE_RATIO,
    TREND_INCREASE_RATIO,
)


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert len(s.branch_codes) == 5
        assert s.trend_thresholds.increase_ratio == TREND_INCREASE_RATIO == 1.1
        assert s.trend_thresholds.decrease_ratio == TREND_DECREASE_RATIO == 0.9
        assert s.trend_thresholds.excellent_pct == 10
        assert s.trend_thresholds.slightly_below_pct == -10
        assert s.trend_thresholds.delivery_share == 0.3
        assert s.trend_thresholds.in_store_share == 0.5

    def test_branch_filter(self):
        s = Settings(_env_file=None, branch_codes=["X", "Y"])
        assert s.is_valid_branch_filter("All")
        assert s.is_valid_branch_filter("X")
        assert not s.is_valid_branch_filter("Z")
        assert not s.is_known_branch("All")

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BRANCH_CODES", '["N1", "N2"]')
        monkeypatch.setenv("APP_ID", "north")
        monkeypatch.setenv("TREND_THRESHOLDS__INCREASE_RATIO", "1.25")
        s = Settings(_env_file=None)
        assert s.branch_codes == ["N1", "N2"]
        assert s.app_id == "north"
        assert s.trend_thresholds.increase_ratio == 1.25
        assert s.trend_thresholds.decrease_ratio == 0.9

    def test_sqlite_fallback(self, monkeypatch):
        monkeypatch.delenv("VERCEL", raising=False)
        s = Settings(_env_file=None, database_url="")
        assert s.effective_database_url == "sqlite:///./salespulse.db"


class TestJSONFormatter:
    def test_extra_fields(self):
        record = logging.LogRecord(
            "salespulse.test", logging.INFO, __file__, 1, "Upserted A-2024-03-01", None, None
        )
        record.record_key = "A-2024-03-01"
        record.branch = "A"
        line = json.loads(JSONFormatter().format(record))
        assert line["level"] == "INFO"
        assert line["message"] == "Upserted A-2024-03-01"
        assert line["record_key"] == "A-2024-03-01"
        assert line["branch"] == "A"
        assert "period" not in line

    def test_logger_is_namespaced_and_single_handler(self):
        first = get_logger("tests")
        second = get_logger("tests")
        assert first is second
        assert first.name == "salespulse.tests"
        assert len(first.handlers) == 1

    def test_lines_carry_app_id_and_period(self):
        record = logging.LogRecord(
            "salespulse.test", logging.INFO, __file__, 1, "Aggregated", None, None
        )
        for key, value in period_extra(3, 2024, "BKK01").items():
            setattr(record, key, value)
        line = json.loads(JSONFormatter(app_id="north").format(record))
        assert line["app_id"] == "north"
        assert line["period"] == "2024-03"
        assert line["branch"] == "BKK01"

    def test_period_extra_without_branch(self):
        assert period_extra(11, 2023) == {"period": "2023-11"}
