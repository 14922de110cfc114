"""Entry point for the community alerts server.

Usage:
    python -m community_alerts [--profile member|admin] [--config alerts.yaml]

Environment Variables:
    ALERTS_CONFIG: Path to a YAML config file (``alerts:`` mapping)
    ALERTS_PROFILE: Access profile, "member" (default) or "admin"
    ALERTS_DATA_FILE: Durable data file (default: alerts_data.dat)
    ALERTS_EXPORT_FILE: Text export file (default: alerts_export.txt)
    ALERTS_AUDIT_FILE: Audit JSONL file, empty to disable (default: alerts_audit.jsonl)
    ALERTS_ID_BASE: First alert ID in an empty system (default: 1000)
    ALERTS_LOG_FORMAT: Log format - "json" (default) or "text"
    ALERTS_LOG_FILE: Also log to ~/.community-alerts/logs/ (default: false)
"""

from __future__ import annotations

import argparse
import logging
import sys

from community_alerts.config import AlertsConfig
from community_alerts.exceptions import ConfigurationError
from community_alerts.oplog import setup_logging
from community_alerts.profiles import PROFILES
from community_alerts.server import create_server

logger = logging.getLogger("community_alerts")


def main(argv: list[str] | None = None) -> None:
    """Run the community alerts MCP server over stdio."""
    parser = argparse.ArgumentParser(
        description="Local Community Alert System - report and track community issues"
    )
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default=None,
        help="Access profile to expose (overrides config; default: member)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file (default: $ALERTS_CONFIG if set)",
    )
    args = parser.parse_args(argv)

    setup_logging("community-alerts")

    try:
        config = AlertsConfig.load(args.config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    profile = args.profile or config.profile
    logger.info("Starting community-alerts server (profile=%s)", profile)
    server = create_server(profile=profile, config=config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
