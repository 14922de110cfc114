"""Community alerts MCP server.

Exposes one tool per operation in the active access profile. Tools are
thin wrappers around AlertService; failures come back as JSON error
payloads, never as exceptions.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from mcp.server.fastmcp import FastMCP

from community_alerts.audit import AuditWriter
from community_alerts.config import AlertsConfig
from community_alerts.exceptions import AlertError
from community_alerts.instructions import PROFILE_INSTRUCTIONS
from community_alerts.models import Report
from community_alerts.oplog import set_profile
from community_alerts.profiles import MUTATING_OPERATIONS, CapabilitySet
from community_alerts.service import AlertService

logger = logging.getLogger(__name__)


def _reports_payload(reports: list[Report]) -> dict[str, Any]:
    return {"count": len(reports), "reports": [r.to_dict() for r in reports]}


def _error_payload(exc: AlertError) -> str:
    return json.dumps({"error": exc.safe_message, "kind": exc.kind})


def create_server(
    profile: str | None = None,
    config: AlertsConfig | None = None,
    service: AlertService | None = None,
) -> FastMCP:
    """Create and configure the alerts MCP server for one access profile."""
    config = config or AlertsConfig.load()
    profile = (profile or config.profile).strip().lower()
    service = service or AlertService.open(config)
    caps = CapabilitySet(service, profile)
    audit = AuditWriter(config.audit_file, profile=profile)
    set_profile(profile)

    if service.startup_warning:
        logger.warning(
            "Starting with an empty store: %s",
            service.startup_warning,
            extra={"operation": "load"},
        )

    server = FastMCP("community-alerts", instructions=PROFILE_INSTRUCTIONS[profile])

    # Expose for testing
    server._service = service
    server._capabilities = caps
    server._audit = audit

    def _register(fn: Callable[..., str]) -> None:
        if caps.allows(fn.__name__):
            server.tool()(fn)

    def _audited(tool: str, params: dict[str, Any], result: dict[str, Any]) -> str:
        if tool in MUTATING_OPERATIONS:
            audit.log(tool=tool, params=params, result_summary=result)
        return json.dumps(result, default=str)

    # ------------------------------------------------------------------
    # Member tools
    # ------------------------------------------------------------------

    def submit_report(
        title: str,
        description: str,
        category: str,
        urgency: str,
        location: str,
        reported_by: str,
    ) -> str:
        """Submit a new community alert. Category is one of WATER_LEAK,
        POTHOLE, LOST_PET, POWER_OUTAGE, STREET_LIGHT, GARBAGE, NOISE,
        OTHER; urgency is LOW, MEDIUM, HIGH or CRITICAL. Returns the new
        alert id."""
        params = {
            "title": title,
            "description": description,
            "category": category,
            "urgency": urgency,
            "location": location,
            "reported_by": reported_by,
        }
        try:
            result = caps.submit_report(**params)
        except AlertError as e:
            return _error_payload(e)
        return _audited("submit_report", params, result)

    def list_reports() -> str:
        """List all alerts in submission order."""
        try:
            return json.dumps(_reports_payload(caps.list_reports()))
        except AlertError as e:
            return _error_payload(e)

    def sort_by_urgency() -> str:
        """List all alerts, most urgent first; ties most recent first."""
        try:
            return json.dumps(_reports_payload(caps.sort_by_urgency()))
        except AlertError as e:
            return _error_payload(e)

    def sort_by_location() -> str:
        """List all alerts by location A-Z (case-insensitive); ties most recent first."""
        try:
            return json.dumps(_reports_payload(caps.sort_by_location()))
        except AlertError as e:
            return _error_payload(e)

    def filter_by_category(category: str) -> str:
        """List alerts in one category, in submission order."""
        try:
            return json.dumps(_reports_payload(caps.filter_by_category(category)))
        except AlertError as e:
            return _error_payload(e)

    def search_by_location(term: str = "") -> str:
        """List alerts whose location contains the term (case-insensitive).
        An empty term matches every alert."""
        try:
            return json.dumps(_reports_payload(caps.search_by_location(term)))
        except AlertError as e:
            return _error_payload(e)

    def report_statistics() -> str:
        """Count alerts by category, urgency and status."""
        try:
            return json.dumps(caps.report_statistics().to_dict())
        except AlertError as e:
            return _error_payload(e)

    # ------------------------------------------------------------------
    # Administrator tools
    # ------------------------------------------------------------------

    def update_status(report_id: int, status: str) -> str:
        """Set an alert's status to OPEN, IN_PROGRESS, RESOLVED or CLOSED."""
        params = {"report_id": report_id, "status": status}
        try:
            result = caps.update_status(**params)
        except AlertError as e:
            return _error_payload(e)
        return _audited("update_status", params, result)

    def delete_report(report_id: int, confirmation: str = "") -> str:
        """Permanently delete one alert.

        Confirm with the administrator first and pass confirmation="yes";
        any other value cancels without deleting.
        """
        params = {"report_id": report_id, "confirmation": confirmation}
        try:
            result = caps.delete_report(**params)
        except AlertError as e:
            return _error_payload(e)
        return _audited("delete_report", params, result)

    def clear_reports(confirmation: str = "") -> str:
        """Permanently delete ALL alerts and the data file.

        Confirm with the administrator first and pass confirmation="yes";
        any other value cancels without deleting.
        """
        params = {"confirmation": confirmation}
        try:
            result = caps.clear_reports(**params)
        except AlertError as e:
            return _error_payload(e)
        return _audited("clear_reports", params, result)

    def export_reports() -> str:
        """Write every alert to the plain-text export file."""
        try:
            result = caps.export_reports()
        except AlertError as e:
            return _error_payload(e)
        return _audited("export_reports", {}, result)

    for tool in (
        submit_report,
        list_reports,
        sort_by_urgency,
        sort_by_location,
        filter_by_category,
        search_by_location,
        report_statistics,
        update_status,
        delete_report,
        clear_reports,
        export_reports,
    ):
        _register(tool)

    logger.info(
        "community-alerts server ready: profile=%s tools=%d reports=%d",
        profile,
        len(caps.operations),
        len(service.store),
        extra={"operation": "startup", "count": len(service.store)},
    )
    return server
