"""Tests for AlertStorage: durable binary round-trip, export, delete."""

import gzip
import json
import os
import stat
from datetime import datetime, timedelta, timezone

import pytest

from community_alerts.exceptions import PersistenceError
from community_alerts.models import Category, Report, Status, Urgency
from community_alerts.persistence import FILE_MODE, FORMAT_VERSION, MAGIC, AlertStorage

TS = datetime(2026, 2, 14, 18, 30, 45, 987654, tzinfo=timezone.utc)


def _reports():
    return [
        Report(
            id=1000,
            title="Streetlight out",
            description="Dark corner since Monday",
            category=Category.STREET_LIGHT,
            urgency=Urgency.MEDIUM,
            location="Elm Road",
            reported_by="Jo",
            timestamp=TS,
        ),
        Report(
            id=1004,
            title="Café flooding ☔",
            description="Multi-line\ndescription",
            category=Category.WATER_LEAK,
            urgency=Urgency.CRITICAL,
            location="",
            reported_by="",
            timestamp=TS + timedelta(microseconds=1),
            status=Status.IN_PROGRESS,
        ),
    ]


@pytest.fixture
def storage(tmp_path):
    return AlertStorage(tmp_path / "alerts_data.dat", tmp_path / "alerts_export.txt")


class TestDurableStore:
    def test_missing_file_is_empty_collection(self, storage):
        loaded = storage.load()
        assert loaded.reports == []
        assert loaded.next_id is None

    def test_roundtrip_field_for_field(self, storage):
        original = _reports()
        storage.save(original, next_id=1010)
        loaded = storage.load()
        assert loaded.reports == original
        assert loaded.next_id == 1010
        assert loaded.reports[1].timestamp.microsecond == 987655
        assert loaded.reports[1].status is Status.IN_PROGRESS

    def test_empty_collection_roundtrip(self, storage):
        storage.save([], next_id=1000)
        assert storage.exists()
        assert storage.load().reports == []

    def test_file_is_binary_with_header(self, storage):
        storage.save(_reports(), next_id=1005)
        blob = storage.data_file.read_bytes()
        assert blob.startswith(MAGIC)
        assert blob[len(MAGIC)] == FORMAT_VERSION
        envelope = json.loads(gzip.decompress(blob[len(MAGIC) + 1:]))
        assert envelope["schema_version"] == 1
        assert [r["id"] for r in envelope["reports"]] == [1000, 1004]

    def test_save_overwrites(self, storage):
        storage.save(_reports(), next_id=1005)
        storage.save(_reports()[:1], next_id=1005)
        assert [r.id for r in storage.load().reports] == [1000]

    def test_save_leaves_no_temp_files(self, storage, tmp_path):
        storage.save(_reports(), next_id=1005)
        assert [p.name for p in tmp_path.iterdir()] == ["alerts_data.dat"]

    def test_saved_file_mode_follows_umask(self, storage):
        storage.save(_reports(), next_id=1005)
        umask = os.umask(0)
        os.umask(umask)
        assert FILE_MODE == 0o644 & ~umask
        assert stat.S_IMODE(os.stat(storage.data_file).st_mode) == FILE_MODE

    def test_save_to_missing_directory_raises(self, tmp_path):
        storage = AlertStorage(tmp_path / "nope" / "data.dat", tmp_path / "export.txt")
        with pytest.raises(PersistenceError) as exc_info:
            storage.save(_reports(), next_id=1005)
        assert exc_info.value.kind == "io_failure"
        assert "nope" not in exc_info.value.safe_message

    def test_bad_magic(self, storage):
        storage.data_file.write_bytes(b"\xac\xed\x00\x05java-serialized")
        with pytest.raises(PersistenceError, match="not a community-alerts data file"):
            storage.load()

    def test_unknown_version(self, storage):
        storage.data_file.write_bytes(MAGIC + bytes([99]) + gzip.compress(b"{}"))
        with pytest.raises(PersistenceError, match="version 99"):
            storage.load()

    def test_truncated_payload(self, storage):
        storage.save(_reports(), next_id=1005)
        blob = storage.data_file.read_bytes()
        storage.data_file.write_bytes(blob[:-10])
        with pytest.raises(PersistenceError, match="Corrupt"):
            storage.load()

    def test_malformed_record(self, storage):
        envelope = {"schema_version": 1, "next_id": 1001, "reports": [{"id": 1000}]}
        payload = gzip.compress(json.dumps(envelope).encode())
        storage.data_file.write_bytes(MAGIC + bytes([FORMAT_VERSION]) + payload)
        with pytest.raises(PersistenceError, match="Corrupt") as exc_info:
            storage.load()
        assert exc_info.value.operation == "load"

    def test_delete(self, storage):
        storage.save(_reports(), next_id=1005)
        assert storage.delete() is True
        assert not storage.exists()
        assert storage.load().reports == []

    def test_delete_missing_is_noop(self, storage):
        assert storage.delete() is False
        assert storage.delete() is False


class TestExport:
    def test_header_and_blocks(self, storage):
        exported_at = datetime(2026, 2, 15, 10, 0, tzinfo=timezone.utc)
        path = storage.export(_reports(), exported_at)
        text = path.read_text(encoding="utf-8")
        lines = text.splitlines()
        assert lines[0] == "=" * 36
        assert lines[1] == "COMMUNITY ALERT SYSTEM - DATA EXPORT"
        assert lines[2] == f"Export Date: {exported_at.isoformat()}"
        assert lines[3] == "Total Alerts: 2"
        assert lines[4] == "=" * 36
        assert "ID: 1000 | Streetlight out [OPEN]" in text
        assert "ID: 1004 | Café flooding ☔ [IN_PROGRESS]" in text
        assert f"Reported by: Jo | Time: {TS.astimezone().strftime('%Y-%m-%d %H:%M')}" in text
        assert text.count("-" * 40) == 2

    def test_export_overwrites(self, storage):
        now = datetime(2026, 2, 15, tzinfo=timezone.utc)
        storage.export(_reports(), now)
        storage.export(_reports()[:1], now)
        text = storage.export_file.read_text(encoding="utf-8")
        assert "Total Alerts: 1" in text
        assert "1004" not in text

    def test_export_file_mode(self, storage):
        path = storage.export(_reports(), datetime(2026, 2, 15, tzinfo=timezone.utc))
        assert stat.S_IMODE(os.stat(path).st_mode) == FILE_MODE

    def test_export_never_touches_data_file(self, storage):
        storage.export(_reports(), datetime(2026, 2, 15, tzinfo=timezone.utc))
        assert not storage.exists()

    def test_export_failure(self, tmp_path):
        storage = AlertStorage(tmp_path / "data.dat", tmp_path / "missing" / "export.txt")
        with pytest.raises(PersistenceError) as exc_info:
            storage.export(_reports(), datetime(2026, 2, 15, tzinfo=timezone.utc))
        assert exc_info.value.operation == "export"
