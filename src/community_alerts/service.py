"""Alert service: the shared core operations behind every access profile.

Mutations rewrite the durable file in full. I/O failures are logged and
reported back as non-fatal warnings; in-memory state is never rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from community_alerts import query
from community_alerts.allocator import IdAllocator
from community_alerts.config import AlertsConfig
from community_alerts.exceptions import NothingToShowError, PersistenceError
from community_alerts.models import (
    MAX_TEXT,
    Category,
    Report,
    Status,
    validate_submission,
    validate_text,
)
from community_alerts.persistence import AlertStorage
from community_alerts.query import Statistics
from community_alerts.store import ReportStore

logger = logging.getLogger(__name__)

AFFIRMATIVE_TOKENS = {"yes", "y"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_affirmative(confirmation: Any) -> bool:
    """True only for an explicit yes. Everything else counts as cancellation."""
    if confirmation is True:
        return True
    if isinstance(confirmation, str):
        return confirmation.strip().lower() in AFFIRMATIVE_TOKENS
    return False


class AlertService:
    """Owns the report store and persists it after every mutation."""

    def __init__(
        self,
        store: ReportStore,
        storage: AlertStorage,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.storage = storage
        self._clock = clock
        self.startup_warning: str | None = None

    @classmethod
    def open(
        cls,
        config: AlertsConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> AlertService:
        """Build a service from config and load any previously saved reports."""
        config = config or AlertsConfig.load()
        service = cls(
            store=ReportStore(IdAllocator(config.id_base)),
            storage=AlertStorage(config.data_file, config.export_file),
            clock=clock,
        )
        service.load()
        return service

    # --- Persistence plumbing ---

    def load(self) -> int:
        """Load the durable file into the store. Returns the number loaded.

        On failure the store is left empty and the message is kept in
        startup_warning.
        """
        try:
            loaded = self.storage.load()
        except PersistenceError as e:
            logger.warning("Error loading alerts: %s", e, extra={"operation": "load"})
            self.startup_warning = e.safe_message
            self.store.replace_all([])
            return 0
        self.store.replace_all(loaded.reports, loaded.next_id)
        return len(loaded.reports)

    def _persist(self, result: dict[str, Any]) -> dict[str, Any]:
        try:
            self.storage.save(self.store.all(), self.store.allocator.peek())
        except PersistenceError as e:
            logger.warning("Error saving alerts: %s", e, extra={"operation": "save"})
            result["persisted"] = False
            result["warning"] = e.safe_message
        else:
            result["persisted"] = True
        return result

    def _require_reports(self, message: str) -> tuple[Report, ...]:
        snapshot = self.store.all()
        if not snapshot:
            raise NothingToShowError(message)
        return snapshot

    # --- Member operations ---

    def submit_report(
        self,
        title: str,
        description: str,
        category: Any,
        urgency: Any,
        location: str,
        reported_by: str,
    ) -> dict[str, Any]:
        # Validate before allocating so rejected input never burns an ID
        submitted = validate_submission(
            title=title,
            description=description,
            category=category,
            urgency=urgency,
            location=location,
            reported_by=reported_by,
        )
        report = Report(
            id=self.store.allocator.next(),
            timestamp=self._clock(),
            status=Status.OPEN,
            **submitted,
        )
        self.store.add(report)
        logger.info(
            "Alert submitted: id=%d category=%s urgency=%s",
            report.id,
            report.category.name,
            report.urgency.name,
            extra={
                "operation": "submit_report",
                "report_id": report.id,
                "category": report.category.name,
                "urgency": report.urgency.name,
            },
        )
        return self._persist({"status": "submitted", "id": report.id, "report": report.to_dict()})

    def list_reports(self) -> list[Report]:
        return list(self._require_reports("No alerts in the system."))

    def sort_by_urgency(self) -> list[Report]:
        return query.sort_by_urgency(self._require_reports("No alerts to sort."))

    def sort_by_location(self) -> list[Report]:
        return query.sort_by_location(self._require_reports("No alerts to sort."))

    def filter_by_category(self, category: Any) -> list[Report]:
        selected = Category.parse(category)
        return query.filter_by_category(self._require_reports("No alerts to filter."), selected)

    def search_by_location(self, term: str) -> list[Report]:
        validate_text(term, "search term", MAX_TEXT)
        return query.search_by_location(self._require_reports("No alerts to search."), term)

    def report_statistics(self) -> Statistics:
        return query.compute_statistics(self._require_reports("No alerts to analyze."))

    def find_report(self, report_id: int) -> Report:
        return self.store.get(report_id)

    # --- Administrator operations ---

    def update_status(self, report_id: int, status: Any) -> dict[str, Any]:
        new_status = Status.parse(status)
        report = self.store.get(report_id)
        previous = report.status
        report.status = new_status
        logger.info(
            "Alert %d status %s -> %s",
            report.id,
            previous.name,
            new_status.name,
            extra={
                "operation": "update_status",
                "report_id": report.id,
                "previous_status": previous.name,
                "status": new_status.name,
            },
        )
        return self._persist(
            {
                "status": "updated",
                "id": report.id,
                "previous": previous.name,
                "current": new_status.name,
            }
        )

    def delete_report(self, report_id: int, confirmation: Any = "") -> dict[str, Any]:
        self._require_reports("No alerts to delete.")
        report = self.store.get(report_id)
        if not is_affirmative(confirmation):
            logger.info(
                "Deletion of alert %d cancelled",
                report.id,
                extra={"operation": "delete_report", "report_id": report.id, "status": "cancelled"},
            )
            return {"status": "cancelled", "id": report.id}
        self.store.remove(report)
        logger.info(
            "Alert %d deleted",
            report.id,
            extra={"operation": "delete_report", "report_id": report.id, "status": "deleted"},
        )
        return self._persist({"status": "deleted", "id": report.id})

    def clear_reports(self, confirmation: Any = "") -> dict[str, Any]:
        if not self.store:
            return {"status": "empty", "deleted": 0, "file_removed": False}
        if not is_affirmative(confirmation):
            logger.info(
                "Clear of %d alert(s) cancelled",
                len(self.store),
                extra={"operation": "clear_reports", "count": len(self.store), "status": "cancelled"},
            )
            return {"status": "cancelled", "deleted": 0, "file_removed": False}
        deleted = self.store.clear()
        result: dict[str, Any] = {"status": "cleared", "deleted": deleted}
        try:
            result["file_removed"] = self.storage.delete()
        except PersistenceError as e:
            logger.warning("Error clearing data file: %s", e, extra={"operation": "clear_reports"})
            result["file_removed"] = False
            result["warning"] = e.safe_message
        logger.info(
            "Cleared %d alert(s)",
            deleted,
            extra={"operation": "clear_reports", "count": deleted, "status": "cleared"},
        )
        return result

    def export_reports(self) -> dict[str, Any]:
        snapshot = self._require_reports("No alerts to export.")
        try:
            path = self.storage.export(snapshot, self._clock())
        except PersistenceError as e:
            logger.warning("Error exporting alerts: %s", e, extra={"operation": "export_reports"})
            return {"status": "failed", "count": 0, "warning": e.safe_message}
        logger.info(
            "Exported %d alert(s)",
            len(snapshot),
            extra={"operation": "export_reports", "count": len(snapshot), "path": str(path)},
        )
        return {"status": "exported", "path": str(path), "count": len(snapshot)}
