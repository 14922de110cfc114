"""Read-only queries over a snapshot of reports.

Every function takes an iterable of reports and returns a new list or
value; the input is never mutated.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from community_alerts.models import Category, Report, Status, Urgency


def _newest_first(reports: Iterable[Report]) -> list[Report]:
    return sorted(reports, key=lambda r: r.timestamp, reverse=True)


def sort_by_urgency(reports: Iterable[Report]) -> list[Report]:
    """CRITICAL first; equal urgency ordered most recent first."""
    # Two stable passes: secondary key first, then primary
    return sorted(_newest_first(reports), key=lambda r: r.urgency.level, reverse=True)


def sort_by_location(reports: Iterable[Report]) -> list[Report]:
    """Location A-Z ignoring case; equal locations ordered most recent first."""
    return sorted(_newest_first(reports), key=lambda r: r.location.casefold())


def filter_by_category(reports: Iterable[Report], category: Category) -> list[Report]:
    return [r for r in reports if r.category is category]


def search_by_location(reports: Iterable[Report], term: str) -> list[Report]:
    """Case-insensitive substring match on location. Empty term matches all."""
    needle = term.casefold()
    return [r for r in reports if needle in r.location.casefold()]


@dataclass(frozen=True)
class Statistics:
    """Grouped counts. Keys with zero reports are omitted."""

    total: int
    by_category: dict[Category, int] = field(default_factory=dict)
    by_urgency: dict[Urgency, int] = field(default_factory=dict)
    by_status: dict[Status, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_category": {k.name: v for k, v in self.by_category.items()},
            "by_urgency": {k.name: v for k, v in self.by_urgency.items()},
            "by_status": {k.name: v for k, v in self.by_status.items()},
        }


def _grouped(counts: Counter, order: Iterable) -> dict:
    return {key: counts[key] for key in order if counts[key]}


def compute_statistics(reports: Iterable[Report]) -> Statistics:
    snapshot = list(reports)
    return Statistics(
        total=len(snapshot),
        by_category=_grouped(Counter(r.category for r in snapshot), Category),
        by_urgency=_grouped(Counter(r.urgency for r in snapshot), Urgency),
        by_status=_grouped(Counter(r.status for r in snapshot), Status),
    )
