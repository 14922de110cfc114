"""Report data model: categories, urgency levels, statuses and the Report record."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any

from community_alerts.exceptions import ValidationError

MAX_TITLE = 200
MAX_TEXT = 10_000

# Display format used by listings and the text export
TIMESTAMP_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"
SEPARATOR = "-" * 40


class _Choice(Enum):
    """Enum that can be resolved from a member, a name, or a 1-based menu index."""

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {cls._label()}: {value!r}")
        members = list(cls)
        if isinstance(value, int):
            if 1 <= value <= len(members):
                return members[value - 1]
            raise ValidationError(
                f"Invalid {cls._label()} index {value}: expected 1-{len(members)}"
            )
        if isinstance(value, str):
            text = value.strip()
            # str.isdigit() also accepts superscripts that int() rejects
            if text.isascii() and text.isdigit():
                return cls.parse(int(text))
            name = text.upper().replace("-", "_").replace(" ", "_")
            if name in cls.__members__:
                return cls.__members__[name]
        choices = ", ".join(m.name for m in members)
        raise ValidationError(f"Invalid {cls._label()}: {value!r} (expected one of {choices})")

    @classmethod
    def _label(cls) -> str:
        return cls.__name__.lower()


class Category(_Choice):
    WATER_LEAK = "WATER_LEAK"
    POTHOLE = "POTHOLE"
    LOST_PET = "LOST_PET"
    POWER_OUTAGE = "POWER_OUTAGE"
    STREET_LIGHT = "STREET_LIGHT"
    GARBAGE = "GARBAGE"
    NOISE = "NOISE"
    OTHER = "OTHER"


class Urgency(_Choice):
    """Ordered severity. The numeric level drives sorting and is never displayed."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def level(self) -> int:
        return self.value


class Status(_Choice):
    """Report status. Any status may be set from any other."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


def validate_text(value: Any, field_name: str, max_len: int, *, required: bool = False) -> str:
    """Reject non-strings, over-long strings, null bytes and (optionally) blanks."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} exceeds maximum length of {max_len} characters")
    if "\x00" in value:
        raise ValidationError(f"{field_name} contains invalid null byte")
    if required and not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return value


def validate_submission(
    *,
    title: Any,
    description: Any,
    category: Any,
    urgency: Any,
    location: Any,
    reported_by: Any,
) -> dict[str, Any]:
    """Check user-submitted report fields and coerce enum choices.

    Returns keyword arguments for the Report constructor (minus id,
    timestamp and status). Raises ValidationError on the first bad field.
    """
    return {
        "title": validate_text(title, "title", MAX_TITLE, required=True),
        "description": validate_text(description, "description", MAX_TEXT, required=True),
        "category": Category.parse(category),
        "urgency": Urgency.parse(urgency),
        "location": validate_text(location, "location", MAX_TEXT),
        "reported_by": validate_text(reported_by, "reported_by", MAX_TEXT),
    }


@dataclass
class Report:
    """One community-submitted issue.

    Only ``status`` may change after construction.
    """

    id: int
    title: str
    description: str
    category: Category
    urgency: Urgency
    location: str
    reported_by: str
    timestamp: datetime
    status: Status = field(default=Status.OPEN)

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "status" and name in self.__dict__:
            raise AttributeError(f"Report.{name} is immutable")
        super().__setattr__(name, value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.name,
            "urgency": self.urgency.name,
            "location": self.location,
            "reported_by": self.reported_by,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Rebuild a report from to_dict() output.

        Raises KeyError/ValueError on malformed data; no text validation is
        applied so stored records round-trip unchanged.
        """
        missing = [f.name for f in fields(cls) if f.name not in data]
        if missing:
            raise KeyError(f"Report record missing fields: {', '.join(missing)}")
        return cls(
            id=int(data["id"]),
            title=str(data["title"]),
            description=str(data["description"]),
            category=Category[data["category"]],
            urgency=Urgency[data["urgency"]],
            location=str(data["location"]),
            reported_by=str(data["reported_by"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            status=Status[data["status"]],
        )

    def render(self) -> str:
        """Human-readable block used by listings and the text export.

        The time is shown in the host's local zone; storage stays UTC.
        """
        return (
            f"ID: {self.id} | {self.title} [{self.status.name}]\n"
            f"Category: {self.category.name} | Urgency: {self.urgency.name}\n"
            f"Location: {self.location}\n"
            f"Description: {self.description}\n"
            f"Reported by: {self.reported_by} | "
            f"Time: {self.timestamp.astimezone().strftime(TIMESTAMP_DISPLAY_FORMAT)}\n"
            f"Status: {self.status.name}\n"
            f"{SEPARATOR}"
        )
