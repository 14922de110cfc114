"""Durable storage and text export for the report collection.

The durable file is rewritten in full after every mutation. Layout:

    MAGIC (7 bytes) | format version (1 byte) | gzip(JSON envelope)

The JSON envelope carries the ID high-water mark alongside the reports
so identifiers stay unique across restarts.
"""

from __future__ import annotations

import gzip
import json
import logging
import os
import tempfile
import zlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from community_alerts.exceptions import PersistenceError
from community_alerts.models import Report

logger = logging.getLogger(__name__)

MAGIC = b"CALERT\x00"
FORMAT_VERSION = 1
_SCHEMA_VERSION = 1

EXPORT_TITLE = "COMMUNITY ALERT SYSTEM - DATA EXPORT"
_EXPORT_RULE = "=" * 36

# mkstemp creates 0600 files; written files get the mode open() would give them
_UMASK = os.umask(0)
os.umask(_UMASK)
FILE_MODE = 0o644 & ~_UMASK


def _atomic_write(path: Path, content: bytes) -> None:
    """Write file atomically via temp file + rename to prevent data loss on crash."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


@dataclass
class LoadedCollection:
    reports: list[Report] = field(default_factory=list)
    next_id: int | None = None


class AlertStorage:
    """Reads and writes the durable data file and the text export."""

    def __init__(self, data_file: str | Path, export_file: str | Path) -> None:
        self.data_file = Path(data_file)
        self.export_file = Path(export_file)

    # --- Durable store ---

    def exists(self) -> bool:
        return self.data_file.exists()

    def encode(self, reports: Iterable[Report], next_id: int) -> bytes:
        envelope = {
            "schema_version": _SCHEMA_VERSION,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "next_id": next_id,
            "reports": [r.to_dict() for r in reports],
        }
        payload = json.dumps(envelope, ensure_ascii=False).encode("utf-8")
        return MAGIC + bytes([FORMAT_VERSION]) + gzip.compress(payload)

    def decode(self, blob: bytes) -> LoadedCollection:
        """Parse a durable file image. Raises PersistenceError on any defect."""
        header_len = len(MAGIC) + 1
        if len(blob) < header_len or not blob.startswith(MAGIC):
            raise PersistenceError(
                f"{self.data_file} is not a community-alerts data file", operation="load"
            )
        version = blob[len(MAGIC)]
        if version != FORMAT_VERSION:
            raise PersistenceError(
                f"Unsupported data file format version {version} in {self.data_file}",
                operation="load",
            )
        try:
            envelope = json.loads(gzip.decompress(blob[header_len:]).decode("utf-8"))
            if not isinstance(envelope, dict):
                raise ValueError(f"envelope must be a mapping, got {type(envelope).__name__}")
            records = envelope.get("reports", [])
            if not isinstance(records, list):
                raise ValueError("'reports' must be a list")
            reports = [Report.from_dict(item) for item in records]
            next_id = envelope.get("next_id")
            if next_id is not None:
                next_id = int(next_id)
        except (OSError, EOFError, zlib.error, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(
                f"Corrupt data file {self.data_file}: {type(e).__name__}: {e}",
                operation="load",
            ) from e
        return LoadedCollection(reports=reports, next_id=next_id)

    def save(self, reports: Sequence[Report], next_id: int) -> None:
        """Overwrite the durable file with the full collection."""
        blob = self.encode(reports, next_id)
        try:
            _atomic_write(self.data_file, blob)
        except OSError as e:
            raise PersistenceError(
                f"Error saving alerts to {self.data_file}: {e}", operation="save"
            ) from e
        logger.debug("Saved %d report(s) to %s", len(reports), self.data_file)

    def load(self) -> LoadedCollection:
        """Read the durable file. A missing file is an empty collection."""
        if not self.data_file.exists():
            logger.debug("No data file at %s, starting empty", self.data_file)
            return LoadedCollection()
        try:
            blob = self.data_file.read_bytes()
        except OSError as e:
            raise PersistenceError(
                f"Error loading alerts from {self.data_file}: {e}", operation="load"
            ) from e
        loaded = self.decode(blob)
        logger.info("Loaded %d existing alert(s) from %s", len(loaded.reports), self.data_file)
        return loaded

    def delete(self) -> bool:
        """Remove the durable file. Returns False if there was nothing to remove."""
        try:
            self.data_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(
                f"Error deleting data file {self.data_file}: {e}", operation="delete"
            ) from e
        logger.info("Deleted data file %s", self.data_file)
        return True

    # --- Text export ---

    def render_export(self, reports: Sequence[Report], exported_at: datetime) -> str:
        lines = [
            _EXPORT_RULE,
            EXPORT_TITLE,
            f"Export Date: {exported_at.isoformat()}",
            f"Total Alerts: {len(reports)}",
            _EXPORT_RULE,
            "",
        ]
        for report in reports:
            lines.append(report.render())
            lines.append("")
        return "\n".join(lines) + "\n"

    def export(self, reports: Sequence[Report], exported_at: datetime) -> Path:
        """Write the human-readable export, overwriting any previous one."""
        text = self.render_export(reports, exported_at)
        try:
            _atomic_write(self.export_file, text.encode("utf-8"))
        except OSError as e:
            raise PersistenceError(
                f"Error exporting alerts to {self.export_file}: {e}", operation="export"
            ) from e
        logger.info("Exported %d report(s) to %s", len(reports), self.export_file)
        return self.export_file
