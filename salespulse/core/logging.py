"""SalesPulse — Structured JSON Logging.

Every line carries the tenant `app_id`. Sales and report events add the
branch, record key and period through `extra=`; `period_extra` builds the
period/branch pair the analyzers log with.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from salespulse.config import settings

# Attributes copied onto the JSON line when passed via `extra=`
EXTRA_FIELDS = ("branch", "record_key", "period", "record_count", "status_code")


def format_period(month: int, year: int) -> str:
    """`2024-03` style period label used in logs and stored reports."""
    return f"{year}-{month:02d}"


def period_extra(month: int, year: int, branch: Optional[str] = None) -> dict:
    extra = {"period": format_period(month, year)}
    if branch is not None:
        extra["branch"] = branch
    return extra


class JSONFormatter(logging.Formatter):
    """One JSON object per line, stamped with the tenant app_id."""

    def __init__(self, app_id: Optional[str] = None):
        super().__init__()
        self.app_id = settings.app_id if app_id is None else app_id

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "app_id": self.app_id,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value
        # dates and enums arrive via extra=
        return json.dumps(log_entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Return a `salespulse.<name>` logger with the JSON handler attached once."""
    logger = logging.getLogger(f"salespulse.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
