"""Data-driven access profile definitions.

A profile is a named set of AlertService operations. Adding a profile =
adding a dict entry. The administrator set is the member set plus the
state-changing operations.
"""

from __future__ import annotations

from typing import Any

from community_alerts.exceptions import AccessDeniedError, ValidationError

MEMBER_OPERATIONS: tuple[str, ...] = (
    "submit_report",
    "list_reports",
    "sort_by_urgency",
    "sort_by_location",
    "filter_by_category",
    "search_by_location",
    "report_statistics",
)

ADMIN_ONLY_OPERATIONS: tuple[str, ...] = (
    "update_status",
    "delete_report",
    "clear_reports",
    "export_reports",
)

# Operations that change state and therefore get an audit entry
MUTATING_OPERATIONS = frozenset({"submit_report", *ADMIN_ONLY_OPERATIONS})

PROFILES: dict[str, dict] = {
    "member": {
        "description": "Community member: submit and browse alerts",
        "operations": MEMBER_OPERATIONS,
    },
    "admin": {
        "description": "System administrator: full control including update, delete, export, clear",
        "operations": MEMBER_OPERATIONS + ADMIN_ONLY_OPERATIONS,
    },
}


def resolve_profile(name: str) -> dict:
    key = (name or "").strip().lower()
    if key not in PROFILES:
        raise ValidationError(
            f"Unknown profile {name!r} (expected one of {', '.join(sorted(PROFILES))})"
        )
    return PROFILES[key]


class CapabilitySet:
    """One profile's view of a shared AlertService.

    Operations in the profile resolve to the bound service methods;
    anything else raises AccessDeniedError.
    """

    def __init__(self, service: Any, profile: str) -> None:
        self.profile = profile.strip().lower()
        self.description = resolve_profile(profile)["description"]
        self.operations = frozenset(PROFILES[self.profile]["operations"])
        self._service = service

    def allows(self, operation: str) -> bool:
        return operation in self.operations

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not set in __init__
        if name.startswith("_") or "operations" not in self.__dict__:
            raise AttributeError(name)
        if name not in self.operations:
            raise AccessDeniedError(name, self.profile)
        return getattr(self._service, name)

    def invoke(self, operation: str, **kwargs: Any) -> Any:
        if not self.allows(operation):
            raise AccessDeniedError(operation, self.profile)
        return getattr(self._service, operation)(**kwargs)
