"""
Binary codec for the snapshot history file.

Layout (big-endian, packed):

Header (16 bytes):
    Bytes 0-3:    magic      0x574D4843
    Bytes 4-7:    version    Format version (1)
    Bytes 8-11:   count      Number of records that follow (0-50)
    Bytes 12-15:  reserved   Always written as 0, ignored on read

Record (44 bytes):
    run_number, clusters_used, inodes_used      u32 x3
    health_score                                i32
    firmware_total, firmware_stub,
    firmware_custom, hw_revision,
    bootloader_version                          u32 x5
    has_primary_device, has_secondary_device,
    network_flag, input_count_a, input_count_b  u8 x5
    padding                                     3 bytes of 0

The file is the header immediately followed by `count` records.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

HISTORY_MAGIC = 0x574D4843
HISTORY_VERSION = 1
MAX_SNAPSHOTS = 50

# Sentinel health score for "usage could not be read"
HEALTH_UNKNOWN = -1

HEADER_FORMAT = ">IIII"
RECORD_FORMAT = ">IIIiIIIIIBBBBB3x"

HEADER_SIZE = 16
RECORD_SIZE = 44

U32_MAX = 0xFFFFFFFF
I32_MIN = -0x80000000
I32_MAX = 0x7FFFFFFF
U8_MAX = 0xFF

_U32_FIELDS = (
    "run_number",
    "clusters_used",
    "inodes_used",
    "firmware_total",
    "firmware_stub",
    "firmware_custom",
    "hw_revision",
    "bootloader_version",
)
_U8_FIELDS = ("input_count_a", "input_count_b")


@dataclass(frozen=True)
class HistoryHeader:
    """Fixed 16-byte header at the start of the history file."""

    magic: int = HISTORY_MAGIC
    version: int = HISTORY_VERSION
    count: int = 0
    reserved: int = 0

    @property
    def is_valid(self) -> bool:
        return self.magic == HISTORY_MAGIC and self.version == HISTORY_VERSION

    def pack(self) -> bytes:
        return struct.pack(HEADER_FORMAT, self.magic, self.version, self.count, self.reserved)

    @classmethod
    def unpack(cls, data: bytes) -> HistoryHeader:
        if len(data) < HEADER_SIZE:
            raise ValueError(f"Header too small: {len(data)} < {HEADER_SIZE}")
        magic, version, count, reserved = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
        return cls(magic=magic, version=version, count=count, reserved=reserved)


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} out of range: {value} (expected {low}..{high})")


@dataclass(frozen=True)
class SnapshotRecord:
    """One system-health snapshot, identified by its run number."""

    run_number: int
    # Storage usage
    clusters_used: int = 0
    inodes_used: int = 0
    health_score: int = HEALTH_UNKNOWN
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
    network_flag: bool = False
    # Input devices
    input_count_a: int = 0
    input_count_b: int = 0

    def __post_init__(self):
        for name in _U32_FIELDS:
            _check_range(name, getattr(self, name), 0, U32_MAX)
        _check_range("health_score", self.health_score, I32_MIN, I32_MAX)
        for name in _U8_FIELDS:
            _check_range(name, getattr(self, name), 0, U8_MAX)

    @property
    def health_known(self) -> bool:
        # Any negative score on disk is treated like the sentinel
        return self.health_score >= 0

    def pack(self) -> bytes:
        return struct.pack(
            RECORD_FORMAT,
            self.run_number,
            self.clusters_used,
            self.inodes_used,
            self.health_score,
            self.firmware_total,
            self.firmware_stub,
            self.firmware_custom,
            self.hw_revision,
            self.bootloader_version,
            int(self.has_primary_device),
            int(self.has_secondary_device),
            int(self.network_flag),
            self.input_count_a,
            self.input_count_b,
        )

    @classmethod
    def unpack(cls, data: bytes) -> SnapshotRecord:
        (
            run_number,
            clusters_used,
            inodes_used,
            health_score,
            firmware_total,
            firmware_stub,
            firmware_custom,
            hw_revision,
            bootloader_version,
            has_primary,
            has_secondary,
            network,
            input_a,
            input_b,
        ) = struct.unpack(RECORD_FORMAT, data[:RECORD_SIZE])

        return cls(
            run_number=run_number,
            clusters_used=clusters_used,
            inodes_used=inodes_used,
            health_score=health_score,
            firmware_total=firmware_total,
            firmware_stub=firmware_stub,
            firmware_custom=firmware_custom,
            hw_revision=hw_revision,
            bootloader_version=bootloader_version,
            has_primary_device=bool(has_primary),
            has_secondary_device=bool(has_secondary),
            network_flag=bool(network),
            input_count_a=input_a,
            input_count_b=input_b,
        )


def decode(data: bytes) -> tuple[HistoryHeader, list[SnapshotRecord]]:
    """
    Decode a history file.

    Never raises on bad input: a short buffer, wrong magic or wrong version
    all decode as an empty history.

    Args:
        data: Raw file content.

    Returns:
        Tuple of (header, records). The returned header's count always
        equals the number of records returned.
    """
    if len(data) < HEADER_SIZE:
        if data:
            logger.warning(f"History file too small ({len(data)} bytes), ignoring")
        return HistoryHeader(), []

    header = HistoryHeader.unpack(data)
    if not header.is_valid:
        logger.warning(
            f"Unrecognized history file (magic=0x{header.magic:08X}, "
            f"version={header.version}), starting fresh"
        )
        return HistoryHeader(), []

    count = min(header.count, MAX_SNAPSHOTS)
    if header.count > MAX_SNAPSHOTS:
        logger.warning(f"History header declares {header.count} records, clamping to {MAX_SNAPSHOTS}")

    available = (len(data) - HEADER_SIZE) // RECORD_SIZE
    if available < count:
        logger.warning(f"History file truncated: expected {count} records, found {available}")
        count = available

    records = []
    for i in range(count):
        offset = HEADER_SIZE + i * RECORD_SIZE
        records.append(SnapshotRecord.unpack(data[offset : offset + RECORD_SIZE]))

    return HistoryHeader(count=len(records)), records


def encode(records: Sequence[SnapshotRecord]) -> bytes:
    """
    Encode a complete history file.

    The header is always recomputed from the records being written.
    """
    if len(records) > MAX_SNAPSHOTS:
        raise ValueError(f"Too many records: {len(records)} > {MAX_SNAPSHOTS}")

    header = HistoryHeader(count=len(records))
    return header.pack() + b"".join(record.pack() for record in records)

