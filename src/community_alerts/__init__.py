"""Local Community Alert System.

Record and triage community-reported issues (water leaks, potholes,
outages, ...) in a local file-backed store, exposed through member and
administrator tool profiles.

Usage:
    python -m community_alerts --profile admin
"""

__version__ = "2.0.0"

from .exceptions import (
    AccessDeniedError,
    AlertError,
    ConfigurationError,
    NothingToShowError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .allocator import IdAllocator
from .models import Category, Report, Status, Urgency
from .store import ReportStore
from .query import Statistics
from .persistence import AlertStorage
from .config import AlertsConfig
from .profiles import PROFILES, CapabilitySet
from .service import AlertService

__all__ = [
    "__version__",
    "AlertError",
    "AccessDeniedError",
    "ConfigurationError",
    "NotFoundError",
    "NothingToShowError",
    "PersistenceError",
    "ValidationError",
    "IdAllocator",
    "Category",
    "Report",
    "Status",
    "Urgency",
    "ReportStore",
    "Statistics",
    "AlertStorage",
    "AlertsConfig",
    "PROFILES",
    "CapabilitySet",
    "AlertService",
]
