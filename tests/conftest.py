"""Shared test fixtures for community-alerts."""

from datetime import datetime, timedelta, timezone

import pytest

from community_alerts.config import AlertsConfig
from community_alerts.service import AlertService


class FakeClock:
    """Deterministic clock: each call is one minute after the previous."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 9, 0, 0, 123456, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = current + timedelta(minutes=1)
        return current


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure no env leakage between tests."""
    for var in (
        "ALERTS_CONFIG",
        "ALERTS_DATA_FILE",
        "ALERTS_EXPORT_FILE",
        "ALERTS_AUDIT_FILE",
        "ALERTS_ID_BASE",
        "ALERTS_PROFILE",
        "ALERTS_LOG_FORMAT",
        "ALERTS_LOG_FILE",
        "ALERTS_OPERATOR",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    """Config with every file under a temp directory."""
    return AlertsConfig(
        data_file=str(tmp_path / "alerts_data.dat"),
        export_file=str(tmp_path / "alerts_export.txt"),
        audit_file=str(tmp_path / "alerts_audit.jsonl"),
    )


@pytest.fixture
def service(config, clock):
    return AlertService.open(config, clock=clock)


def submit(service, **overrides):
    """Submit a report with sensible defaults; returns the new ID."""
    fields = {
        "title": "Burst pipe",
        "description": "Water pouring onto the road",
        "category": "WATER_LEAK",
        "urgency": "MEDIUM",
        "location": "Main Street",
        "reported_by": "Sam",
    }
    fields.update(overrides)
    return service.submit_report(**fields)["id"]


@pytest.fixture
def submit_report():
    return submit
