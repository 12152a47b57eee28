"""
Compact timeline of the most recent snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from healthlog.codec import SnapshotRecord

TIMELINE_LENGTH = 10


def health_band(score: int) -> str:
    """Bucket a health score into good / fair / poor (or unknown)."""
    if score < 0:
        return "unknown"
    if score >= 80:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def score_label(score: int) -> str:
    if score < 0:
        return "n/a"
    return f"{score}/100"


@dataclass(frozen=True)
class TimelineRow:
    run_number: int
    clusters_used: int
    inodes_used: int
    health_score: int

    @property
    def score_label(self) -> str:
        return score_label(self.health_score)

    @property
    def band(self) -> str:
        return health_band(self.health_score)

    @classmethod
    def from_record(cls, record: SnapshotRecord) -> TimelineRow:
        return cls(
            run_number=record.run_number,
            clusters_used=record.clusters_used,
            inodes_used=record.inodes_used,
            health_score=record.health_score,
        )


def render(records: Iterable[SnapshotRecord], limit: int = TIMELINE_LENGTH) -> list[TimelineRow]:
    """
    Project the last `limit` records into timeline rows, oldest first.

    A timeline needs at least two snapshots; fewer yield no rows, as does
    a non-positive `limit`.
    """
    records = list(records)
    if len(records) <= 1 or limit <= 0:
        return []
    return [TimelineRow.from_record(r) for r in records[-limit:]]
