"""Tests for AlertsConfig loading: defaults, YAML, environment."""

import pytest
import yaml

from community_alerts.config import AlertsConfig, load_config_file
from community_alerts.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults(self):
        cfg = AlertsConfig.load()
        assert cfg.data_file == "alerts_data.dat"
        assert cfg.export_file == "alerts_export.txt"
        assert cfg.audit_file == "alerts_audit.jsonl"
        assert cfg.id_base == 1000
        assert cfg.profile == "member"


class TestYamlFile:
    def test_values_from_file(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text(yaml.dump({"alerts": {
            "data_file": "/var/lib/alerts/data.dat",
            "id_base": 5000,
            "profile": "Admin",
        }}))
        cfg = AlertsConfig.load(path)
        assert cfg.data_file == "/var/lib/alerts/data.dat"
        assert cfg.id_base == 5000
        assert cfg.profile == "admin"
        assert cfg.export_file == "alerts_export.txt"

    def test_env_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ALERTS_HOME", "/srv/alerts")
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts:\n  export_file: ${ALERTS_HOME}/export.txt\n  audit_file: ${UNSET_VAR_XYZ}\n")
        cfg = AlertsConfig.load(path)
        assert cfg.export_file == "/srv/alerts/export.txt"
        assert cfg.audit_file == ""

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts:\n  id_base: 1\n")
        monkeypatch.setenv("ALERTS_CONFIG", str(path))
        assert AlertsConfig.load().id_base == 1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text("")
        assert load_config_file(path) == {}
        assert AlertsConfig.load(path).data_file == "alerts_data.dat"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            AlertsConfig.load(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            AlertsConfig.load(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            AlertsConfig.load(path)

    def test_alerts_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts: just-a-string\n")
        with pytest.raises(ConfigurationError, match="'alerts' key"):
            AlertsConfig.load(path)

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts:\n  colour: blue\n")
        assert AlertsConfig.load(path).profile == "member"


class TestEnvironment:
    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "alerts.yaml"
        path.write_text("alerts:\n  data_file: from-file.dat\n  profile: member\n")
        monkeypatch.setenv("ALERTS_DATA_FILE", "from-env.dat")
        monkeypatch.setenv("ALERTS_PROFILE", "admin")
        cfg = AlertsConfig.load(path)
        assert cfg.data_file == "from-env.dat"
        assert cfg.profile == "admin"

    def test_bad_id_base(self, monkeypatch):
        monkeypatch.setenv("ALERTS_ID_BASE", "lots")
        with pytest.raises(ConfigurationError, match="id_base"):
            AlertsConfig.load()

    def test_negative_id_base(self, monkeypatch):
        monkeypatch.setenv("ALERTS_ID_BASE", "-5")
        with pytest.raises(ConfigurationError, match="non-negative"):
            AlertsConfig.load()

    def test_bad_profile(self, monkeypatch):
        monkeypatch.setenv("ALERTS_PROFILE", "superuser")
        with pytest.raises(ConfigurationError, match="profile"):
            AlertsConfig.load()
