"""Tests for per-tick metrics."""

import csv
import json
from datetime import datetime, timezone

import pytest

from experiments.metrics import MetricsCollector, TickMetrics
from generators.prime_field import PrimeFieldGenerator


def _tick(index: int) -> TickMetrics:
    summary = PrimeFieldGenerator(max_range=10).generate().summary
    return TickMetrics.from_summary(
        tick=index,
        summary=summary,
        issues={"nan": 0, "infinite": 0},
        elapsed_ms=1.5,
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestTickMetrics:
    def test_from_summary(self):
        metrics = _tick(0)

        assert metrics.total_primes_found == 4
        assert metrics.decoding_rate == pytest.approx(40.0)
        assert metrics.issues == {"nan": 0, "infinite": 0}

    def test_to_dict(self):
        data = _tick(2).to_dict()

        assert data["tick"] == 2
        assert data["timestamp"] == "2026-01-01T00:00:00+00:00"
        assert data["issues"]["nan"] == 0
        assert data["tunnel_issues"] == {}
        json.dumps(data)


class TestMetricsCollector:
    def test_latest(self):
        collector = MetricsCollector()
        assert collector.latest is None

        collector.record_tick(_tick(0))
        collector.record_tick(_tick(1))

        assert collector.latest.tick == 1

    def test_export_csv_drops_issue_breakdown(self, tmp_path):
        collector = MetricsCollector()
        collector.record_tick(_tick(0))

        path = tmp_path / "metrics.csv"
        collector.export_csv(path)

        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert "issues" not in rows[0]
        assert "tunnel_issues" not in rows[0]
        assert rows[0]["total_primes_found"] == "4"

    def test_export_csv_empty(self, tmp_path):
        path = tmp_path / "metrics.csv"
        MetricsCollector().export_csv(path)
        assert not path.exists()


def test_tunnel_issues_are_copied():
    tunnel_issues = {"negative": 0, "limit_exceeded": 1}
    metrics = TickMetrics.from_summary(
        tick=0,
        summary=PrimeFieldGenerator(max_range=5).generate().summary,
        issues={},
        elapsed_ms=0.5,
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        tunnel_issues=tunnel_issues,
    )
    tunnel_issues["negative"] = 9

    assert metrics.to_dict()["tunnel_issues"] == {"negative": 0, "limit_exceeded": 1}
