"""
Unit tests for HealthLog class.

Tests the save and review operations and metrics source resolution.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from healthlog.codec import U32_MAX, decode, encode
from healthlog.collectors import FileCollector, HostCollector
from healthlog.config import Config
from healthlog.core import HealthLog, HistoryReview, SaveResult
from healthlog.errors import RunNumberExhaustedError, StorageUnavailableError
from healthlog.snapshot import MetricsBundle
from healthlog.trend import Trend


class TestHealthLogInitialization:
    """Test HealthLog class initialization."""

    def test_init_with_config(self, sample_config):
        """Test initialization with Config object."""
        healthlog = HealthLog(sample_config)

        assert healthlog.config is sample_config
        assert healthlog.locator.candidates == sample_config.history_paths

    def test_init_without_config(self):
        """Test initialization without config (uses defaults)."""
        healthlog = HealthLog()
        assert isinstance(healthlog.config, Config)

    def test_default_metrics_source(self, sample_config):
        """Test that the configured collector is used."""
        assert isinstance(HealthLog(sample_config).metrics_source, HostCollector)

        sample_config.metrics_source = "file"
        assert isinstance(HealthLog(sample_config).metrics_source, FileCollector)

    def test_unknown_metrics_source(self, sample_config):
        """Test that an unknown collector name is rejected when needed."""
        sample_config.metrics_source = "nope"
        healthlog = HealthLog(sample_config)

        with pytest.raises(ValueError):
            healthlog.metrics_source

    def test_explicit_metrics_source(self, sample_config, static_source):
        """Test that an explicit source wins over the config."""
        assert HealthLog(sample_config, metrics_source=static_source).metrics_source is static_source


class TestSaveSnapshot:
    """Test HealthLog.save_snapshot()."""

    def test_first_save(self, sample_config, static_source, history_paths):
        """Test saving into empty storage."""
        result = HealthLog(sample_config, metrics_source=static_source).save_snapshot()

        assert result == SaveResult(
            success=True, run_number=1, count=1, location=str(history_paths[0])
        )
        _, records = decode(history_paths[0].read_bytes())
        assert [r.run_number for r in records] == [1]
        assert records[0].firmware_total == 42

    def test_save_continues_numbering(self, sample_config, static_source, history_paths, record_factory):
        """Test numbering continues from the stored history."""
        history_paths[0].write_bytes(encode([record_factory(7), record_factory(8)]))

        result = HealthLog(sample_config, metrics_source=static_source).save_snapshot()

        assert result.run_number == 9
        assert result.count == 3

    def test_save_without_storage(self, tmp_path, static_source):
        """Test that missing storage is raised, not reported as a write failure."""
        config = Config(history_paths=[str(tmp_path / "sd" / "h.dat"), str(tmp_path / "usb" / "h.dat")])
        metrics_source = MagicMock(side_effect=static_source)

        with pytest.raises(StorageUnavailableError):
            HealthLog(config, metrics_source=metrics_source).save_snapshot()

        metrics_source.assert_not_called()

    def test_save_write_failure(self, sample_config, static_source):
        """Test that a failed write is reported with the attempted run number."""
        healthlog = HealthLog(sample_config, metrics_source=static_source)

        with patch("healthlog.store.HistoryStore.persist", return_value=False):
            result = healthlog.save_snapshot()

        assert result.success is False
        assert result.run_number == 1

    def test_collector_failure_writes_nothing(self, sample_config, history_paths):
        """Test that a failing collector leaves storage untouched."""
        def failing_source():
            raise OSError("probe failed")

        with pytest.raises(OSError):
            HealthLog(sample_config, metrics_source=failing_source).save_snapshot()

        assert history_paths[0].read_bytes() == b""

    def test_save_with_exhausted_run_numbers(self, sample_config, history_paths, record_factory):
        """Test that a history ending at the largest run number is left untouched."""
        data = encode([record_factory(U32_MAX - 1), record_factory(U32_MAX)])
        history_paths[0].write_bytes(data)
        metrics_source = MagicMock(return_value=MetricsBundle())

        with pytest.raises(RunNumberExhaustedError):
            HealthLog(sample_config, metrics_source=metrics_source).save_snapshot()

        metrics_source.assert_not_called()
        assert history_paths[0].read_bytes() == data

    def test_save_rejects_out_of_range_metrics(self, sample_config, history_paths):
        """Test that unrecordable metrics raise ValueError and write nothing."""
        metrics_source = MagicMock(return_value=MetricsBundle(clusters_used=-5, input_count_a=300))

        with pytest.raises(ValueError):
            HealthLog(sample_config, metrics_source=metrics_source).save_snapshot()

        assert history_paths[0].read_bytes() == b""


class TestReview:
    """Test HealthLog.review() and friends."""

    def test_review_empty(self, sample_config):
        """Test reviewing empty storage."""
        review = HealthLog(sample_config).review()

        assert isinstance(review, HistoryReview)
        assert review.count == 0
        assert review.latest is None
        assert review.trend is None
        assert review.timeline == []

    def test_review_single_snapshot(self, sample_config, history_paths, record_factory):
        """Test that one snapshot has no trend or timeline."""
        history_paths[0].write_bytes(encode([record_factory(1)]))

        latest, trend = HealthLog(sample_config).get_latest_with_trend()

        assert latest.run_number == 1
        assert trend is None

    def test_review_with_trend(self, sample_config, history_paths, record_factory):
        """Test the comparison of the last two snapshots."""
        history_paths[0].write_bytes(
            encode(
                [
                    record_factory(1, clusters_used=100),
                    record_factory(2, clusters_used=500),
                    record_factory(3, clusters_used=650),
                ]
            )
        )

        review = HealthLog(sample_config).review()

        assert review.count == 3
        assert review.latest.run_number == 3
        assert review.trend.previous_run == 2
        assert review.trend.get("Clusters Used").trend == Trend.WORSE
        assert [row.run_number for row in review.timeline] == [1, 2, 3]

    def test_review_does_not_write(self, sample_config, history_paths, record_factory):
        """Test that reviewing never modifies the file."""
        data = encode([record_factory(1), record_factory(2)])
        history_paths[0].write_bytes(data)

        HealthLog(sample_config).review()

        assert history_paths[0].read_bytes() == data

    def test_review_never_collects(self, sample_config, history_paths, record_factory):
        """Test that review does not touch the metrics source."""
        history_paths[0].write_bytes(encode([record_factory(1), record_factory(2)]))
        metrics_source = MagicMock(return_value=MetricsBundle())

        HealthLog(sample_config, metrics_source=metrics_source).review()

        metrics_source.assert_not_called()

    def test_render_timeline(self, sample_config, history_paths, record_factory):
        """Test timeline rendering through the orchestrator."""
        history_paths[1].write_bytes(encode([record_factory(i) for i in range(1, 16)]))

        rows = HealthLog(sample_config).render_timeline()

        assert [row.run_number for row in rows] == list(range(6, 16))
