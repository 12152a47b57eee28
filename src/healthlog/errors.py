"""
Exception types raised by Healthlog.
"""

from __future__ import annotations


class HealthlogError(Exception):
    """Base class for Healthlog errors."""

    pass


class StorageUnavailableError(HealthlogError):
    """Raised when no candidate location can hold the history file."""

    def __init__(self, candidates: list[str] | None = None):
        self.candidates = candidates or []
        tried = ", ".join(self.candidates) if self.candidates else "none configured"
        super().__init__(f"No storage available for history tracking (tried: {tried})")


class RunNumberExhaustedError(HealthlogError):
    """Raised when the last stored run number cannot be incremented."""

    def __init__(self, last_run: int):
        self.last_run = last_run
        super().__init__(f"Run number {last_run} is the largest the history file can hold")
