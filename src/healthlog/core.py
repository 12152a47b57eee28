"""
Core orchestration module for Healthlog.

Implements the two top-level operations: saving a new snapshot and
reviewing the stored history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from healthlog.codec import SnapshotRecord
from healthlog.collectors import get_collector
from healthlog.config import Config
from healthlog.snapshot import MetricsBundle, collect
from healthlog.storage import StorageLocator
from healthlog.store import HistoryStore
from healthlog.timeline import TimelineRow, render
from healthlog.trend import TrendReport, compare

logger = logging.getLogger(__name__)

MetricsSource = Callable[[], MetricsBundle]


@dataclass
class SaveResult:
    """Result of a save operation."""

    success: bool
    run_number: int
    count: int = 0
    location: str | None = None


@dataclass
class HistoryReview:
    """Read-only view of the stored history."""

    location: str
    records: list[SnapshotRecord] = field(default_factory=list)
    trend: TrendReport | None = None
    timeline: list[TimelineRow] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def latest(self) -> SnapshotRecord | None:
        return self.records[-1] if self.records else None


class HealthLog:
    """
    Main entry point for snapshot history operations.

    Every operation reloads the history from storage; no state is kept
    between calls.
    """

    def __init__(
        self,
        config: Config | None = None,
        metrics_source: MetricsSource | None = None,
        locator: StorageLocator | None = None,
    ):
        self.config = config or Config()
        self.locator = locator or StorageLocator.from_paths(self.config.history_paths)
        self._metrics_source = metrics_source

    @property
    def metrics_source(self) -> MetricsSource:
        """Callable producing the metrics bundle for a new snapshot."""
        if self._metrics_source is None:
            collector_cls = get_collector(self.config.metrics_source)
            if collector_cls is None:
                raise ValueError(f"Unknown metrics source: {self.config.metrics_source}")
            self._metrics_source = collector_cls(self.config)
        return self._metrics_source

    def load(self) -> HistoryStore:
        """
        Load the current history.

        Raises:
            StorageUnavailableError: If no storage location is usable.
        """
        return HistoryStore.load(self.locator)

    def save_snapshot(self) -> SaveResult:
        """
        Collect a new snapshot and append it to the history.

        Returns:
            SaveResult; success is False if the file could not be written.

        Raises:
            StorageUnavailableError: If no storage location is usable.
            RunNumberExhaustedError: If the stored run numbers are used up.
        """
        store = self.load()
        run_number = store.next_run_number()

        logger.info(f"Saving diagnostic snapshot #{run_number}")
        record = collect(self.metrics_source(), run_number)
        store.append(record)

        success = store.persist()
        if success:
            logger.info(f"Snapshot #{run_number} saved ({len(store)} total on record)")
        else:
            logger.error(f"Snapshot #{run_number} could not be saved")

        return SaveResult(
            success=success,
            run_number=run_number,
            count=len(store),
            location=store.location,
        )

    def review(self) -> HistoryReview:
        """
        Build the full review: records, trend vs previous run and timeline.

        Raises:
            StorageUnavailableError: If no storage location is usable.
        """
        store = self.load()
        review = HistoryReview(location=store.location, records=list(store))

        if store.previous is not None and store.latest is not None:
            review.trend = compare(store.previous, store.latest)
        review.timeline = render(store)

        return review

    def get_latest_with_trend(self) -> tuple[SnapshotRecord | None, TrendReport | None]:
        """Latest snapshot and its comparison with the previous one."""
        review = self.review()
        return review.latest, review.trend

    def render_timeline(self) -> list[TimelineRow]:
        """Timeline rows for the most recent snapshots."""
        return render(self.load())
