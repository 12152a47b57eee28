"""
Trend analysis between two consecutive snapshots.

Classifies the direction of each tracked metric and raises alerts for
significant regressions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from healthlog.codec import SnapshotRecord

# Cluster growth above this between two runs is flagged
USAGE_GROWTH_THRESHOLD = 100

# Health score drop beyond this between two runs is flagged
HEALTH_DROP_THRESHOLD = 10


class Trend(str, Enum):
    """Direction of change for a single metric."""

    UNCHANGED = "unchanged"
    WORSE = "worse"
    IMPROVED = "improved"


class AlertKind(str, Enum):
    USAGE_GROWTH = "usage_growth"
    HEALTH_REGRESSION = "health_regression"
    NEW_STUB = "new_stub"


@dataclass
class MetricTrend:
    """Comparison result for one metric."""

    label: str
    previous: int
    current: int
    trend: Trend

    @property
    def delta(self) -> int:
        return self.current - self.previous


@dataclass
class Alert:
    """A significant change worth the user's attention."""

    kind: AlertKind
    severity: str
    message: str
    hint: str


@dataclass
class TrendReport:
    """Comparison of the latest snapshot against the previous one."""

    previous_run: int
    current_run: int
    metrics: list[MetricTrend] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)

    def get(self, label: str) -> MetricTrend | None:
        """Find a metric comparison by label."""
        for metric in self.metrics:
            if metric.label == label:
                return metric
        return None

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)


# (label, record attribute, higher_is_worse)
TRACKED_METRICS = [
    ("Clusters Used", "clusters_used", True),
    ("Inodes Used", "inodes_used", True),
    ("Health Score", "health_score", False),
    ("Total Firmware", "firmware_total", False),
    ("Stub Firmware", "firmware_stub", True),
]


def classify(previous: int, current: int, higher_is_worse: bool) -> Trend:
    """
    Classify the change of a metric between two runs.

    Args:
        previous: Value from the older snapshot.
        current: Value from the newer snapshot.
        higher_is_worse: True if an increase is a regression.
    """
    if previous == current:
        return Trend.UNCHANGED
    if (current > previous) == higher_is_worse:
        return Trend.WORSE
    return Trend.IMPROVED


def compare(previous: SnapshotRecord, current: SnapshotRecord) -> TrendReport:
    """
    Compare two snapshots metric by metric and evaluate alert rules.

    The health score is only compared when both snapshots have a known
    score.
    """
    report = TrendReport(previous_run=previous.run_number, current_run=current.run_number)
    health_comparable = previous.health_known and current.health_known

    for label, attr, higher_is_worse in TRACKED_METRICS:
        if attr == "health_score" and not health_comparable:
            continue
        old = getattr(previous, attr)
        new = getattr(current, attr)
        report.metrics.append(MetricTrend(label, old, new, classify(old, new, higher_is_worse)))

    report.alerts = check_alerts(previous, current)
    return report


def check_alerts(previous: SnapshotRecord, current: SnapshotRecord) -> list[Alert]:
    """Evaluate every alert rule independently."""
    alerts = []

    if current.clusters_used > previous.clusters_used + USAGE_GROWTH_THRESHOLD:
        alerts.append(
            Alert(
                kind=AlertKind.USAGE_GROWTH,
                severity="warning",
                message="Storage usage increased significantly since last run!",
                hint="Check if new applications or save data are consuming space.",
            )
        )

    if (
        previous.health_known
        and current.health_known
        and current.health_score < previous.health_score - HEALTH_DROP_THRESHOLD
    ):
        alerts.append(
            Alert(
                kind=AlertKind.HEALTH_REGRESSION,
                severity="error",
                message="Health score dropped significantly!",
                hint="Free up storage space and run a full checkup.",
            )
        )

    if current.firmware_stub > previous.firmware_stub:
        alerts.append(
            Alert(
                kind=AlertKind.NEW_STUB,
                severity="warning",
                message="More stub firmware slots detected than before.",
                hint="A system update or tool may have stubbed firmware slots.",
            )
        )

    return alerts
