"""
Storage backends and history location discovery.

The history file lives on one of several candidate removable devices.
Candidates are tried in a fixed preference order: a location that already
holds the file wins, otherwise the first one that accepts a new file.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterable

logger = logging.getLogger(__name__)

HISTORY_FILENAME = "healthlog-history.dat"

# Candidate history files (in order of preference)
DEFAULT_HISTORY_PATHS = [
    Path("/media/sd") / HISTORY_FILENAME,  # Primary removable device
    Path("/media/usb") / HISTORY_FILENAME,  # Secondary removable device
]


class StorageBackend(ABC):
    """
    Minimal capability set for a place that can hold the history file.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the backing file."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Return True if the history file already exists here."""
        pass

    @abstractmethod
    def open_read(self) -> BinaryIO:
        """Open the history file for reading."""
        pass

    @abstractmethod
    def open_write(self, truncate: bool = True) -> BinaryIO:
        """Open the history file for writing, creating it if needed."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.location!r})"


class FileBackend(StorageBackend):
    """History file on a local (usually removable) filesystem path."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def exists(self) -> bool:
        return self.path.is_file()

    def open_read(self) -> BinaryIO:
        return open(self.path, "rb")

    def open_write(self, truncate: bool = True) -> BinaryIO:
        # Parent directories are never created: a missing mount point means
        # the device is not present.
        return open(self.path, "wb" if truncate else "ab")


class StorageLocator:
    """
    Chooses which backend holds (or will hold) the history file.

    Resolution order:
    1. The first backend whose file can be opened for reading
    2. The first backend that accepts a create/write probe
    3. None if no backend is usable
    """

    def __init__(self, backends: Iterable[StorageBackend]):
        self.backends = list(backends)

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path]) -> StorageLocator:
        """Build a locator over plain file paths."""
        return cls(FileBackend(p) for p in paths)

    @property
    def candidates(self) -> list[str]:
        return [b.location for b in self.backends]

    def resolve_path(self) -> StorageBackend | None:
        """
        Resolve the backend to use for the history file.

        Returns:
            The selected backend, or None if no candidate is readable or
            writable.
        """
        for backend in self.backends:
            if backend.exists() and self._probe_read(backend):
                logger.debug(f"Using existing history file at {backend.location}")
                return backend

        for backend in self.backends:
            if self._probe_write(backend):
                logger.debug(f"History file will be created at {backend.location}")
                return backend

        logger.warning("No storage available for history tracking")
        return None

    def _probe_read(self, backend: StorageBackend) -> bool:
        try:
            with backend.open_read():
                return True
        except OSError as e:
            logger.debug(f"Read probe failed for {backend.location}: {e}")
            return False

    def _probe_write(self, backend: StorageBackend) -> bool:
        try:
            # Append mode so a probe never truncates existing content
            with backend.open_write(truncate=False):
                return True
        except OSError as e:
            logger.debug(f"Write probe failed for {backend.location}: {e}")
            return False
