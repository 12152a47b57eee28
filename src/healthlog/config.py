"""
Configuration management for Healthlog.

Supports configuration via YAML files, environment variables, and programmatic access.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from healthlog.storage import DEFAULT_HISTORY_PATHS

DEFAULT_CONFIG_PATHS = [
    Path("/etc/healthlog/config.yaml"),
    Path.home() / ".config" / "healthlog" / "config.yaml",
    Path("healthlog-config.yaml"),
]

# Nested YAML keys that do not match a field name once flattened
_SECTION_ALIASES = {
    ("history", "paths"): "history_paths",
    ("metrics", "source"): "metrics_source",
    ("metrics", "file"): "metrics_file",
    ("metrics", "storage_path"): "storage_path",
    ("metrics", "cluster_size"): "cluster_size",
    ("logging", "level"): "log_level",
    ("logging", "file"): "log_file",
}


@dataclass
class Config:
    """
    Configuration container for Healthlog.

    Priority (highest to lowest):
    1. Programmatic values passed to __init__
    2. Environment variables (prefixed with HEALTHLOG_)
    3. Config file values
    4. Default values
    """

    # History storage (candidates in order of preference)
    history_paths: list[str] = field(
        default_factory=lambda: [str(p) for p in DEFAULT_HISTORY_PATHS]
    )

    # Metrics collection
    metrics_source: str = "host"
    metrics_file: str | None = None
    storage_path: str = "/"
    cluster_size: int = 16384

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        # Flatten nested structure if present
        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                for subkey, subvalue in value.items():
                    flat[_SECTION_ALIASES.get((key, subkey), subkey)] = subvalue
            else:
                flat[key] = value

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in flat.items() if k in known_fields}

        if isinstance(filtered.get("history_paths"), str):
            filtered["history_paths"] = [filtered["history_paths"]]

        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Fully resolved Config instance.
        """
        base_config: dict[str, Any] = {}

        # Find and load config file
        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    base_config = yaml.safe_load(f) or {}
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                    break

        # Create config from file
        config = cls.from_dict(base_config) if base_config else cls()

        # Override with environment variables
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "HEALTHLOG_HISTORY_PATHS": "history_paths",
            "HEALTHLOG_METRICS_SOURCE": "metrics_source",
            "HEALTHLOG_METRICS_FILE": "metrics_file",
            "HEALTHLOG_STORAGE_PATH": "storage_path",
            "HEALTHLOG_CLUSTER_SIZE": "cluster_size",
            "HEALTHLOG_LOG_LEVEL": "log_level",
            "HEALTHLOG_LOG_FILE": "log_file",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                # Type coercion
                current = getattr(self, attr)
                if isinstance(current, list):
                    setattr(self, attr, [p for p in value.split(os.pathsep) if p])
                elif isinstance(current, bool):
                    setattr(self, attr, value.lower() in ("true", "1", "yes"))
                elif isinstance(current, int):
                    setattr(self, attr, int(value))
                else:
                    setattr(self, attr, value)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "history": {
                "paths": list(self.history_paths),
            },
            "metrics": {
                "source": self.metrics_source,
                "file": self.metrics_file,
                "storage_path": self.storage_path,
                "cluster_size": self.cluster_size,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
