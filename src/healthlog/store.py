"""
Bounded, ordered history of snapshot records.

The store is always loaded fresh from storage and written back in full;
nothing is cached between operations.
"""

from __future__ import annotations

import logging
from typing import Iterator

from healthlog.codec import MAX_SNAPSHOTS, U32_MAX, SnapshotRecord, decode, encode
from healthlog.errors import RunNumberExhaustedError, StorageUnavailableError
from healthlog.storage import StorageBackend, StorageLocator

logger = logging.getLogger(__name__)


class HistoryStore:
    """
    Ordered sequence of at most MAX_SNAPSHOTS records, oldest first.

    Appending to a full store evicts the oldest record (strict FIFO).
    """

    def __init__(
        self,
        backend: StorageBackend,
        records: list[SnapshotRecord] | None = None,
    ):
        self.backend = backend
        self.records: list[SnapshotRecord] = list(records or [])

    @classmethod
    def load(cls, locator: StorageLocator) -> HistoryStore:
        """
        Resolve the history location and read its content.

        A missing, unreadable or unrecognized file loads as an empty store.

        Raises:
            StorageUnavailableError: If no candidate location is usable.
        """
        backend = locator.resolve_path()
        if backend is None:
            raise StorageUnavailableError(locator.candidates)

        data = b""
        if backend.exists():
            try:
                with backend.open_read() as f:
                    data = f.read()
            except OSError as e:
                logger.warning(f"Could not read history from {backend.location}: {e}")

        _, records = decode(data)
        logger.debug(f"Loaded {len(records)} snapshot(s) from {backend.location}")
        return cls(backend, records)

    @property
    def location(self) -> str:
        return self.backend.location

    @property
    def latest(self) -> SnapshotRecord | None:
        return self.records[-1] if self.records else None

    @property
    def previous(self) -> SnapshotRecord | None:
        return self.records[-2] if len(self.records) >= 2 else None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SnapshotRecord]:
        return iter(self.records)

    def next_run_number(self) -> int:
        """
        Run number for the next snapshot, derived from stored records.

        Raises:
            RunNumberExhaustedError: If the last run number is already U32_MAX.
        """
        if not self.records:
            return 1
        last = self.records[-1].run_number
        if last >= U32_MAX:
            raise RunNumberExhaustedError(last)
        return last + 1

    def append(self, record: SnapshotRecord) -> None:
        """
        Add a record at the end, evicting the oldest one if full.

        Raises:
            ValueError: If the run number does not increase.
        """
        if self.records and record.run_number <= self.records[-1].run_number:
            raise ValueError(
                f"Run number {record.run_number} does not follow "
                f"{self.records[-1].run_number}"
            )

        if len(self.records) >= MAX_SNAPSHOTS:
            evicted = self.records.pop(0)
            logger.debug(f"History full, evicting run #{evicted.run_number}")

        self.records.append(record)

    def persist(self) -> bool:
        """
        Write the full sequence back to storage.

        Returns:
            True if the file was written, False on I/O failure.
        """
        data = encode(self.records)
        try:
            with self.backend.open_write() as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write history to {self.backend.location}: {e}")
            return False

        logger.debug(f"Wrote {len(self.records)} snapshot(s) to {self.backend.location}")
        return True
