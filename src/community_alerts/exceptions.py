"""Custom exception hierarchy for community-alerts.

Exception messages are split into a full message (for logging) and a
safe message that can be handed back to a tool client.
"""

from __future__ import annotations


class AlertError(Exception):
    """Base exception for community-alerts.

    All custom exceptions inherit from this class, allowing callers to
    catch every alert-specific error with a single except clause.
    """

    kind = "error"

    def __init__(self, message: str, *, safe_message: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Full error message (for logging)
            safe_message: Client-safe message (no internal details)
        """
        super().__init__(message)
        self._safe_message = safe_message or message

    @property
    def safe_message(self) -> str:
        """Return client-safe error message."""
        return self._safe_message


class ConfigurationError(AlertError):
    """Invalid configuration file or environment value."""

    kind = "configuration_error"


class NotFoundError(AlertError):
    """No report matches the requested identifier."""

    kind = "not_found"

    def __init__(self, report_id: int) -> None:
        super().__init__(f"Alert not found with ID: {report_id}")
        self.report_id = report_id


class ValidationError(AlertError):
    """Input outside the accepted range or set.

    Raised when:
    - A category, urgency or status value is not recognized
    - A required text field is blank
    - Text exceeds length limits or contains null bytes
    """

    kind = "validation_failed"


class PersistenceError(AlertError):
    """Durable load/save or export I/O failed."""

    kind = "io_failure"

    def __init__(self, message: str, *, operation: str = "save") -> None:
        # Never expose filesystem paths to clients
        super().__init__(
            message,
            safe_message=f"Could not {operation} alerts. Check server logs for details.",
        )
        self.operation = operation


class NothingToShowError(AlertError):
    """The store holds no reports, so there is nothing to list or act on."""

    kind = "nothing_to_show"


class AccessDeniedError(AlertError):
    """Operation is not part of the active access profile."""

    kind = "access_denied"

    def __init__(self, operation: str, profile: str) -> None:
        super().__init__(f"Operation '{operation}' is not available to the {profile} profile")
        self.operation = operation
        self.profile = profile
