"""Operational logging for community-alerts.

JSON lines on stderr (stdout stays clean for the stdio tool protocol),
optionally mirrored to ~/.community-alerts/logs/. Alert context passed via
``extra=`` (report_id, operation, ...) and the active access profile are
emitted as top-level fields.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOG_DIR = Path.home() / ".community-alerts" / "logs"

# Record attributes that may be attached through ``extra=`` and are emitted
ALERT_FIELDS = (
    "profile",
    "operation",
    "report_id",
    "category",
    "urgency",
    "status",
    "previous_status",
    "count",
    "path",
)


class _StructuredFormatter(logging.Formatter):
    def __init__(self, service_name: str = "community-alerts") -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        for key in ALERT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value
        if record.levelno >= logging.WARNING:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }
        return json.dumps(log_data, default=str)


class ProfileFilter(logging.Filter):
    """Stamps the active access profile onto every record that lacks one."""

    def __init__(self, profile: str = "") -> None:
        super().__init__()
        self.profile = profile

    def filter(self, record: logging.LogRecord) -> bool:
        if self.profile and not getattr(record, "profile", None):
            record.profile = self.profile
        return True


_profile_filter = ProfileFilter()


def set_profile(profile: str) -> None:
    """Record the access profile the process is serving."""
    _profile_filter.profile = profile


def setup_logging(
    service_name: str = "community-alerts",
    *,
    level: int = logging.INFO,
    json_format: bool | None = None,
    log_to_file: bool | None = None,
) -> None:
    """Configure operational logging for the package logger.

    Args:
        service_name: Service name for log entries; also names the package
            logger (hyphens become underscores).
        level: Logging level.
        json_format: If None, ALERTS_LOG_FORMAT decides ("text" for plain
            text, JSON otherwise).
        log_to_file: If None, ALERTS_LOG_FILE decides (default: off).
    """
    if json_format is None:
        json_format = os.environ.get("ALERTS_LOG_FORMAT", "json").lower() != "text"
    if log_to_file is None:
        log_to_file = os.environ.get("ALERTS_LOG_FILE", "false").lower() in ("true", "1", "yes")

    pkg_logger = logging.getLogger(service_name.replace("-", "_"))
    pkg_logger.setLevel(level)
    pkg_logger.handlers.clear()

    pkg_logger.propagate = False

    def _attach(handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(_profile_filter)
        pkg_logger.addHandler(handler)

    _attach(
        logging.StreamHandler(sys.stderr),
        _StructuredFormatter(service_name)
        if json_format
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
    )

    if log_to_file:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(LOG_DIR / f"{service_name}.jsonl", encoding="utf-8")
        except OSError as exc:
            pkg_logger.warning("File logging to %s disabled: %s", LOG_DIR, exc)
        else:
            _attach(file_handler, _StructuredFormatter(service_name))
