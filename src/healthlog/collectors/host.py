"""
Host metrics collector.

Measures storage pressure, removable device presence, attached input
devices and board revision on the local Linux host.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path

import psutil

from healthlog.collectors.base import BaseCollector
from healthlog.codec import U32_MAX
from healthlog.snapshot import MAX_INPUT_DEVICES, MetricsBundle


def _u32(value: int) -> int:
    return max(0, min(int(value), U32_MAX))


class HostCollector(BaseCollector):
    """Collects snapshot metrics from the running host."""

    name = "host"
    description = "Storage usage, removable devices and input devices of this host"

    def collect(self) -> MetricsBundle:
        """Collect host metrics."""
        bundle = MetricsBundle()

        self._get_storage_usage(bundle)
        self._get_inode_usage(bundle)

        bundle.has_primary_device, bundle.has_secondary_device = self._get_device_presence()
        bundle.input_count_a = self._count_devices("/dev/input/js*")
        bundle.input_count_b = self._count_devices("/dev/input/by-id/*-event-joystick")
        bundle.hw_revision = self._get_board_revision()

        return bundle

    def _get_storage_usage(self, bundle: MetricsBundle) -> None:
        """Fill cluster usage for the configured storage path."""
        cluster_size = max(self.config.cluster_size, 1)
        try:
            usage = psutil.disk_usage(self.config.storage_path)
        except OSError as e:
            self.logger.warning(f"Could not read usage of {self.config.storage_path}: {e}")
            bundle.usage_readable = False
            return

        bundle.clusters_used = _u32(usage.used // cluster_size)
        bundle.cluster_capacity = _u32(usage.total // cluster_size)

    def _get_inode_usage(self, bundle: MetricsBundle) -> None:
        """Fill inode usage from `df -i` for the configured storage path."""
        stdout, _, rc = self.run_command(["df", "-i", "-P", self.config.storage_path])
        if rc != 0 or not stdout:
            return

        lines = stdout.strip().split("\n")
        if len(lines) < 2:
            return

        parts = lines[-1].split()
        if len(parts) < 6 or parts[1] == "-":
            return

        try:
            total = int(parts[1])
            used = int(parts[2])
        except ValueError:
            return

        # Filesystems without fixed inode tables (btrfs) report zero
        if total > 0:
            bundle.inodes_used = _u32(used)
            bundle.inode_capacity = _u32(total)

    def _get_device_presence(self) -> tuple[bool, bool]:
        """Check whether the mount points of the history candidates are mounted."""
        mounts = [Path(p).parent for p in self.config.history_paths[:2]]
        present = [os.path.ismount(m) for m in mounts]
        while len(present) < 2:
            present.append(False)
        return present[0], present[1]

    def _count_devices(self, pattern: str) -> int:
        return min(len(glob.glob(pattern)), MAX_INPUT_DEVICES)

    def _get_board_revision(self) -> int:
        """Board revision code from /proc/cpuinfo, 0 if not reported."""
        for line in self.read_file("/proc/cpuinfo").split("\n"):
            key, _, value = line.partition(":")
            if key.strip().lower() == "revision":
                try:
                    return _u32(int(value.strip(), 16))
                except ValueError:
                    return 0
        return 0
