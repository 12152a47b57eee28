"""
Metrics file collector.

Reads a snapshot's metrics from a YAML document produced by an external
tool, e.g.:

    clusters_used: 1530
    inodes_used: 2200
    firmware_total: 42
    firmware_stub: 3
    has_primary_device: true
"""

from __future__ import annotations

from pathlib import Path

import yaml

from healthlog.collectors.base import BaseCollector
from healthlog.snapshot import MetricsBundle


class FileCollector(BaseCollector):
    """Loads snapshot metrics from a YAML file."""

    name = "file"
    description = "Metrics read from a YAML file (metrics_file setting)"

    def collect(self) -> MetricsBundle:
        """
        Load metrics from the configured file.

        Raises:
            ValueError: If no metrics file is configured or it is malformed.
            FileNotFoundError: If the metrics file does not exist.
        """
        if not self.config.metrics_file:
            raise ValueError("No metrics file configured. Set 'metrics_file' in config.")

        path = Path(self.config.metrics_file)
        if not path.exists():
            raise FileNotFoundError(f"Metrics file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Metrics file must contain a mapping: {path}")

        bundle = MetricsBundle.from_dict(data)
        self.logger.debug(f"Loaded metrics from {path}")
        return bundle
