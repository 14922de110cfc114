"""Audit trail of state-changing alert operations.

Append-only JSONL, one entry per mutating tool call. Audit failures are
logged and never interrupt the operation being audited.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _sanitize_slug(raw: str) -> str:
    """Lowercase, replace invalid characters with hyphens, cap at 40 chars."""
    slug = re.sub(r"[^a-z0-9-]", "-", raw.lower()).strip("-")[:40]
    return slug or "unknown"


def resolve_operator() -> str:
    """Resolve who is running the tool: ALERTS_OPERATOR > OS username."""
    operator = os.environ.get("ALERTS_OPERATOR")
    if not operator:
        try:
            operator = getpass.getuser()
        except (KeyError, OSError):
            operator = "unknown"
    return _sanitize_slug(operator)


class AuditWriter:
    """Writes audit entries to a single JSONL file.

    Sequence counter protected by lock; writes are fsynced.
    An empty audit_file disables auditing.
    """

    def __init__(self, audit_file: str | Path, profile: str = "") -> None:
        self.audit_file = Path(audit_file) if audit_file else None
        self.profile = profile
        self._sequence = 0
        self._date_str = ""
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.audit_file is not None

    def _next_entry_id(self) -> str:
        """Generate next entry ID: alerts-{date}-{seq}."""
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        with self._lock:
            if today != self._date_str:
                self._date_str = today
                self._sequence = self._resume_sequence(today)
            self._sequence += 1
            seq = self._sequence
        return f"alerts-{today}-{seq:03d}"

    def _resume_sequence(self, date_str: str) -> int:
        """Scan the existing log for the highest sequence on this date.

        Must be called under self._lock.
        """
        if not self.audit_file or not self.audit_file.exists():
            return 0
        prefix = f"alerts-{date_str}-"
        max_seq = 0
        try:
            with open(self.audit_file, encoding="utf-8") as f:
                for line in f:
                    if prefix not in line:
                        continue
                    try:
                        entry_id = json.loads(line).get("entry_id", "")
                        max_seq = max(max_seq, int(entry_id[len(prefix):]))
                    except (json.JSONDecodeError, ValueError, AttributeError):
                        continue
        except OSError as e:
            logger.warning("Failed to read audit log %s for sequence resume: %s", self.audit_file, e)
        return max_seq

    def log(self, tool: str, params: dict[str, Any], result_summary: dict[str, Any]) -> str | None:
        """Write an audit entry. Returns the entry ID, or None when disabled."""
        if not self.enabled:
            return None
        entry_id = self._next_entry_id()
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "entry_id": entry_id,
            "tool": tool,
            "operator": resolve_operator(),
            "profile": self.profile,
            "params": params,
            "result_summary": _summarize(result_summary),
        }
        self._write_entry(entry)
        return entry_id

    def _write_entry(self, entry: dict) -> bool:
        try:
            with open(self.audit_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
                f.flush()
                os.fsync(f.fileno())
            return True
        except OSError as e:
            logger.warning(
                "Failed to write audit entry %s tool=%s: %s",
                entry.get("entry_id"),
                entry.get("tool"),
                e,
            )
            return False

    def get_entries(self, since: str | None = None) -> list[dict]:
        """Read back audit entries, optionally only those at or after ``since``."""
        if not self.audit_file or not self.audit_file.exists():
            return []
        entries = []
        try:
            with open(self.audit_file, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entry = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Corrupt JSONL line in %s", self.audit_file)
                        continue
                    if since and entry.get("ts", "") < since:
                        continue
                    entries.append(entry)
        except OSError as e:
            logger.warning("Failed to read audit entries from %s: %s", self.audit_file, e)
        return entries


def _summarize(result: dict[str, Any]) -> dict[str, Any]:
    """Drop the full report snapshot; the id and outcome fields remain."""
    return {key: value for key, value in result.items() if key != "report"}
