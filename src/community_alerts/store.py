"""In-memory ordered report collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from community_alerts.allocator import IdAllocator
from community_alerts.exceptions import NotFoundError
from community_alerts.models import Report

logger = logging.getLogger(__name__)


class ReportStore:
    """Owns the report collection and the allocator that numbers it.

    Insertion order is preserved for default enumeration. The store never
    persists anything itself; callers save after mutating.
    """

    def __init__(self, allocator: IdAllocator | None = None) -> None:
        self.allocator = allocator or IdAllocator()
        self._reports: list[Report] = []

    def __len__(self) -> int:
        return len(self._reports)

    def __bool__(self) -> bool:
        return bool(self._reports)

    def __iter__(self) -> Iterator[Report]:
        return iter(self.all())

    def add(self, report: Report) -> None:
        self.allocator.observe(report.id)
        self._reports.append(report)

    def find_by_id(self, report_id: int) -> Report | None:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    def get(self, report_id: int) -> Report:
        report = self.find_by_id(report_id)
        if report is None:
            raise NotFoundError(report_id)
        return report

    def remove(self, report: Report | int) -> Report:
        """Remove a report by instance or ID and return it."""
        report_id = report.id if isinstance(report, Report) else report
        for index, existing in enumerate(self._reports):
            if existing.id == report_id:
                return self._reports.pop(index)
        raise NotFoundError(report_id)

    def clear(self) -> int:
        count = len(self._reports)
        self._reports.clear()
        return count

    def all(self) -> tuple[Report, ...]:
        """Read-only snapshot in collection order."""
        return tuple(self._reports)

    def replace_all(self, reports: Iterable[Report], next_id: int | None = None) -> None:
        """Install a loaded collection, advancing the allocator past every ID seen."""
        loaded = list(reports)
        self._reports = loaded
        for report in loaded:
            self.allocator.observe(report.id)
        if next_id is not None and next_id > self.allocator.base:
            self.allocator.observe(next_id - 1)
        logger.debug(
            "Store holds %d report(s), next id %d", len(loaded), self.allocator.peek()
        )
