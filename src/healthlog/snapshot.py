"""
Snapshot construction from collected metrics.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from healthlog.codec import HEALTH_UNKNOWN, SnapshotRecord

# Storage capacity the usage counters are measured against by default
DEFAULT_CLUSTER_CAPACITY = 2048
DEFAULT_INODE_CAPACITY = 6143

MAX_INPUT_DEVICES = 4

# (threshold percent, penalty), checked highest first
USAGE_PENALTIES = [
    (95.0, 30),
    (85.0, 15),
    (75.0, 5),
]


@dataclass
class MetricsBundle:
    """
    Raw metrics gathered by a collector for one snapshot.

    Every field defaults to zero/False so a collector only fills what it
    can actually measure.
    """

    # Storage usage
    clusters_used: int = 0
    inodes_used: int = 0
    cluster_capacity: int = DEFAULT_CLUSTER_CAPACITY
    inode_capacity: int = DEFAULT_INODE_CAPACITY
    usage_readable: bool = True

    # Firmware inventory
    firmware_total: int = 0
    firmware_stub: int = 0
    firmware_custom: int = 0

    # Hardware identity
    hw_revision: int = 0
    bootloader_version: int = 0

    # Devices
    has_primary_device: bool = False
    has_secondary_device: bool = False

    # Input devices
    input_count_a: int = 0
    input_count_b: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricsBundle:
        """Create a bundle from a dictionary, ignoring unknown keys."""
        known = {f.name: f.type for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if known[key] == "bool":
                values[key] = bool(value)
            else:
                values[key] = int(value)
        return cls(**values)

    def validate(self) -> None:
        """
        Check the counters a snapshot can record.

        Raises:
            ValueError: If an input device count is outside 0..MAX_INPUT_DEVICES.
        """
        for name in ("input_count_a", "input_count_b"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_INPUT_DEVICES:
                raise ValueError(
                    f"{name} out of range: {value} (expected 0..{MAX_INPUT_DEVICES})"
                )


def usage_penalty(used: int, capacity: int) -> int:
    """Score penalty for a single usage counter."""
    percent = used * 100.0 / capacity
    for threshold, penalty in USAGE_PENALTIES:
        if percent > threshold:
            return penalty
    return 0


def compute_health_score(bundle: MetricsBundle) -> int:
    """
    Derive the 0-100 health score from storage pressure.

    Returns HEALTH_UNKNOWN when usage could not be read. The sentinel is
    never clamped.
    """
    if not bundle.usage_readable:
        return HEALTH_UNKNOWN
    if bundle.cluster_capacity <= 0 or bundle.inode_capacity <= 0:
        return HEALTH_UNKNOWN

    score = 100
    score -= usage_penalty(bundle.clusters_used, bundle.cluster_capacity)
    score -= usage_penalty(bundle.inodes_used, bundle.inode_capacity)
    return max(score, 0)


def collect(bundle: MetricsBundle, run_number: int) -> SnapshotRecord:
    """
    Build the snapshot record for `run_number` from a metrics bundle.

    Raises:
        ValueError: If a metric does not fit the record layout.
    """
    bundle.validate()
    return SnapshotRecord(
        run_number=run_number,
        clusters_used=bundle.clusters_used,
        inodes_used=bundle.inodes_used,
        health_score=compute_health_score(bundle),
        firmware_total=bundle.firmware_total,
        firmware_stub=bundle.firmware_stub,
        firmware_custom=bundle.firmware_custom,
        hw_revision=bundle.hw_revision,
        bootloader_version=bundle.bootloader_version,
        has_primary_device=bundle.has_primary_device,
        has_secondary_device=bundle.has_secondary_device,
        network_flag=False,
        input_count_a=bundle.input_count_a,
        input_count_b=bundle.input_count_b,
    )
