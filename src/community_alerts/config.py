"""Configuration for community-alerts.

Defaults, overlaid by an optional YAML file (``alerts:`` mapping with
``${VAR}`` interpolation), overlaid by ``ALERTS_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from community_alerts.allocator import DEFAULT_ID_BASE
from community_alerts.exceptions import ConfigurationError
from community_alerts.profiles import PROFILES

logger = logging.getLogger(__name__)

CONFIG_ENV = "ALERTS_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

_ENV_OVERRIDES = {
    "data_file": "ALERTS_DATA_FILE",
    "export_file": "ALERTS_EXPORT_FILE",
    "audit_file": "ALERTS_AUDIT_FILE",
    "id_base": "ALERTS_ID_BASE",
    "profile": "ALERTS_PROFILE",
}


def _interpolate_env(value: str) -> str:
    """Replace ${VAR} patterns with environment variable values.

    Unset variables become empty strings so a literal '${VAR}' never
    leaks into a path.
    """

    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _walk_and_interpolate(obj):
    if isinstance(obj, str):
        return _interpolate_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(item) for item in obj]
    return obj


def load_config_file(path: str | Path) -> dict:
    """Load a YAML config file with env var interpolation.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid
            YAML, or not a mapping.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("Invalid YAML in config file %s: %s", path, e)
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e
    except OSError as e:
        logger.error("Cannot read config file %s: %s", path, e)
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config file must contain a YAML mapping, got {type(raw).__name__}: {path}"
        )
    return _walk_and_interpolate(raw)


@dataclass
class AlertsConfig:
    """Runtime configuration."""

    # Binary whole-collection store, rewritten after every mutation
    data_file: str = "alerts_data.dat"

    # Plain-text export, never read back
    export_file: str = "alerts_export.txt"

    # JSONL audit trail of mutating tool calls ("" disables)
    audit_file: str = "alerts_audit.jsonl"

    # First identifier handed out in an empty system
    id_base: int = DEFAULT_ID_BASE

    # Access profile exposed by the tool server: "member" or "admin"
    profile: str = "member"

    def apply(self, values: dict[str, Any], source: str) -> None:
        for key, value in values.items():
            if key not in _ENV_OVERRIDES:
                logger.warning("Ignoring unknown config key %r from %s", key, source)
                continue
            if key == "id_base":
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ConfigurationError(
                        f"id_base must be an integer, got {value!r} ({source})"
                    ) from None
                if value < 0:
                    raise ConfigurationError(f"id_base must be non-negative ({source})")
            elif key == "profile":
                value = str(value).strip().lower()
                if value not in PROFILES:
                    raise ConfigurationError(
                        f"profile must be one of {', '.join(sorted(PROFILES))}, "
                        f"got {value!r} ({source})"
                    )
            elif value is None:
                value = ""
            else:
                value = str(value)
            setattr(self, key, value)

    @classmethod
    def load(cls, path: str | Path | None = None) -> AlertsConfig:
        cfg = cls()

        path = path or os.environ.get(CONFIG_ENV)
        if path:
            raw = load_config_file(path)
            section = raw.get("alerts", {})
            if not isinstance(section, dict):
                raise ConfigurationError(
                    f"Config 'alerts' key must be a mapping, got {type(section).__name__}"
                )
            cfg.apply(section, str(path))

        env_values = {
            key: os.environ[var] for key, var in _ENV_OVERRIDES.items() if os.environ.get(var)
        }
        if env_values:
            cfg.apply(env_values, "environment")

        return cfg
