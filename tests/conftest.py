"""
Pytest fixtures and configuration for Healthlog tests.

Provides reusable fixtures for history locations, snapshot records and
metric sources across the test suite.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from healthlog.codec import SnapshotRecord
from healthlog.config import Config
from healthlog.snapshot import MetricsBundle
from healthlog.storage import StorageLocator


# Storage Fixtures
@pytest.fixture
def device_dirs(tmp_path):
    """Two mounted removable devices (primary, secondary)."""
    primary = tmp_path / "sd"
    secondary = tmp_path / "usb"
    primary.mkdir()
    secondary.mkdir()
    return primary, secondary


@pytest.fixture
def history_paths(device_dirs) -> list[Path]:
    """Candidate history files on the two devices."""
    primary, secondary = device_dirs
    return [primary / "healthlog-history.dat", secondary / "healthlog-history.dat"]


@pytest.fixture
def locator(history_paths):
    """Locator over the temporary candidate paths."""
    return StorageLocator.from_paths(history_paths)


@pytest.fixture
def sample_config(history_paths, tmp_path):
    """Configuration pointing at the temporary devices."""
    return Config(
        history_paths=[str(p) for p in history_paths],
        metrics_source="host",
        storage_path=str(tmp_path),
        log_level="DEBUG",
    )


# Snapshot Fixtures
def make_record(run_number: int, **overrides) -> SnapshotRecord:
    """Build a realistic snapshot record for `run_number`."""
    values = {
        "run_number": run_number,
        "clusters_used": 500,
        "inodes_used": 1200,
        "health_score": 100,
        "firmware_total": 40,
        "firmware_stub": 2,
        "firmware_custom": 3,
        "hw_revision": 0x11,
        "bootloader_version": 4,
        "has_primary_device": True,
        "has_secondary_device": False,
        "network_flag": False,
        "input_count_a": 1,
        "input_count_b": 2,
    }
    values.update(overrides)
    return SnapshotRecord(**values)


@pytest.fixture
def record_factory():
    """Factory for snapshot records."""
    return make_record


@pytest.fixture
def sample_bundle():
    """Metrics bundle with moderate storage pressure."""
    return MetricsBundle(
        clusters_used=1000,
        inodes_used=2000,
        firmware_total=42,
        firmware_stub=3,
        firmware_custom=4,
        hw_revision=0x11,
        bootloader_version=4,
        has_primary_device=True,
        has_secondary_device=True,
        input_count_a=2,
        input_count_b=1,
    )


@pytest.fixture
def static_source(sample_bundle):
    """Zero-argument metrics source returning the sample bundle."""
    return lambda: sample_bundle


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "cli: marks tests as CLI tests")
