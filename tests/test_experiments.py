"""Tests for run configuration, artifacts, and the runner."""

from __future__ import annotations

import csv
import json
import random
import threading
from pathlib import Path

import pytest
import yaml

from experiments.artifacts import ArtifactManager, read_jsonl
from experiments.config import ExperimentConfig, load_config, save_config
from experiments.runner import ExperimentRunner
from generators.prime_field import PrimeFieldGenerator
from generators.time_crystal import TimeCrystalMonitor
from generators.tunnel_depth import TunnelDepthGenerator


def _config(tmp_path: Path, **overrides) -> ExperimentConfig:
    values = dict(
        run_id="test_run",
        seed=42,
        max_range=50,
        artifact_dir=str(tmp_path / "artifacts"),
        prime_interval_s=0.0,
        max_prime_ticks=2,
        generate_plots=False,
        generate_report=False,
    )
    values.update(overrides)
    return ExperimentConfig(**values)


class TestExperimentConfig:
    def test_load_config_from_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / "test_config.yaml"
        config_data = {
            "run_id": "test_run_001",
            "seed": 42,
            "max_range": 200,
            "base_lambda": 0.999,
            "tunnel_steps": 50,
            "prime_interval_s": 1.0,
            "max_prime_ticks": 3,
            "crystal_samples": 10,
            "artifact_dir": "artifacts",
        }

        with open(config_path, "w") as f:
            yaml.dump(config_data, f)

        config = load_config(config_path)

        assert config.run_id == "test_run_001"
        assert config.max_range == 200
        assert config.base_lambda == 0.999
        assert config.tunnel_steps == 50
        assert config.max_prime_ticks == 3
        assert config.crystal_samples == 10
        assert len(config.reference_zeros) == 6

    def test_load_config_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_load_config_empty_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        with pytest.raises(ValueError):
            load_config(config_path)

    def test_load_config_invalid_values(self, tmp_path: Path) -> None:
        config_path = tmp_path / "bad.yaml"
        with open(config_path, "w") as f:
            yaml.dump({"run_id": "bad", "seed": 1, "max_range": 0}, f)

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(config_path)

    def test_unbounded_ticks(self, tmp_path: Path) -> None:
        config_path = tmp_path / "forever.yaml"
        config_path.write_text('run_id: "forever"\nseed: 1\nmax_prime_ticks: null\n')

        assert load_config(config_path).max_prime_ticks is None

    def test_save_config(self, tmp_path: Path) -> None:
        config = ExperimentConfig(run_id="test_save", seed=123, max_range=77, crystal_samples=5)

        config_path = tmp_path / "saved_config.yaml"
        save_config(config, config_path)

        assert config_path.exists()

        loaded = load_config(config_path)
        assert loaded.to_dict() == config.to_dict()

    def test_default_config_file_loads(self) -> None:
        config = load_config(Path(__file__).parent.parent / "configs" / "default.yaml")

        assert config.max_range == 1000
        assert config.max_prime_ticks == 1


class TestArtifactManager:
    def test_directory_structure(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path))

        assert manager.run_dir == tmp_path / "artifacts" / "test_run"
        assert manager.run_dir.is_dir()
        assert manager.plots_dir.is_dir()

    def test_snapshot_config(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        manager = ArtifactManager(config)
        manager.snapshot_config()

        with open(manager.config_path) as f:
            saved = yaml.safe_load(f)
        assert saved["run_id"] == "test_run"
        assert saved["max_range"] == 50

    def test_save_prime_field(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path))
        result = PrimeFieldGenerator(max_range=10).generate()

        manager.save_prime_field(result)

        points = manager.load_prime_field()
        assert len(points) == 10
        assert points[1]["x"] == 2
        assert points[1]["is_prime"] is True

        with open(manager.prime_field_csv_path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 10
        assert rows[0]["x"] == "1"

        primes = manager.load_primes()
        assert primes["primes"] == [2, 3, 5, 7]
        assert primes["summary"]["total_primes_found"] == 4

    def test_save_prime_field_replaces_previous(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path))
        manager.save_prime_field(PrimeFieldGenerator(max_range=30).generate())
        manager.save_prime_field(PrimeFieldGenerator(max_range=10).generate())

        assert len(manager.load_prime_field()) == 10
        assert not list(manager.run_dir.glob(".*.tmp"))

    def test_save_tunnel_and_crystal(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path))
        manager.save_tunnel_depth(TunnelDepthGenerator(rng=random.Random(1)).generate())

        monitor = TimeCrystalMonitor()
        for t in range(5):
            monitor.record(float(t))
        manager.save_time_crystal(monitor.snapshot())

        assert len(manager.load_tunnel_depth()) == 100
        crystal = manager.load_time_crystal()
        assert len(crystal) == 5
        assert crystal[0]["status"]["status_message"] == "Stable"

    def test_summary_statuses(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path, max_prime_ticks=2))
        assert manager.get_summary()["status"] == "no_data"

        manager.save_tick_metrics({"tick": 0, "decoding_rate": 30.0, "issues": {"nan": 1}})
        summary = manager.get_summary()
        assert summary["status"] == "interrupted"
        assert summary["numeric_issues"] == 1

        manager.save_tick_metrics({"tick": 1, "decoding_rate": 30.0, "issues": {}})
        assert manager.get_summary()["status"] == "completed"

        unbounded = ArtifactManager(_config(tmp_path, max_prime_ticks=None))
        assert unbounded.get_summary()["status"] == "stopped"

    def test_reset_metrics(self, tmp_path: Path) -> None:
        manager = ArtifactManager(_config(tmp_path))
        manager.save_tick_metrics({"tick": 0})
        manager.reset_metrics()

        assert manager.load_metrics() == []
        manager.reset_metrics()


class TestExperimentRunner:
    def test_end_to_end(self, tmp_path: Path) -> None:
        config = _config(tmp_path, crystal_samples=5, crystal_interval_s=0.0, generate_report=True)

        summary = ExperimentRunner(config, clock=lambda: 1.0).run()

        assert summary["status"] == "completed"
        assert summary["ticks_completed"] == 2
        assert summary["total_primes_found"] == 15
        assert summary["decoding_rate"] == pytest.approx(30.0)
        assert summary["numeric_issues"] == 0
        assert summary["has_tunnel_depth"] is True

        run_dir = tmp_path / "artifacts" / "test_run"
        for name in (
            "config.yaml",
            "metrics.jsonl",
            "metrics.csv",
            "prime_field.jsonl",
            "prime_field.csv",
            "primes.json",
            "tunnel_depth.jsonl",
            "time_crystal.jsonl",
            "report.md",
            "report.html",
        ):
            assert (run_dir / name).exists(), name

        metrics = read_jsonl(run_dir / "metrics.jsonl")
        assert [m["tick"] for m in metrics] == [0, 1]
        assert metrics[0]["issues"]["nan"] == 0
        assert metrics[0]["decoding_rate"] == metrics[1]["decoding_rate"]
        assert metrics[0]["tunnel_issues"]["negative"] == 0
        assert "limit_exceeded" in metrics[1]["tunnel_issues"]
        assert summary["tunnel_issues"] == 0
        assert len(read_jsonl(run_dir / "time_crystal.jsonl")) == 5

        with open(run_dir / "primes.json") as f:
            assert json.load(f)["primes"][:4] == [2, 3, 5, 7]

    def test_rerun_starts_fresh_metrics(self, tmp_path: Path) -> None:
        config = _config(tmp_path, max_prime_ticks=1)

        ExperimentRunner(config).run()
        summary = ExperimentRunner(config).run()

        assert summary["ticks_completed"] == 1

    def test_crystal_disabled_by_default(self, tmp_path: Path) -> None:
        ExperimentRunner(_config(tmp_path, max_prime_ticks=1)).run()

        assert not (tmp_path / "artifacts" / "test_run" / "time_crystal.jsonl").exists()

    def test_cancelled_before_start(self, tmp_path: Path) -> None:
        runner = ExperimentRunner(_config(tmp_path))
        runner.token.cancel()

        summary = runner.run()

        assert summary["status"] == "no_data"
        assert not (tmp_path / "artifacts" / "test_run" / "tunnel_depth.jsonl").exists()

    def test_report_failure_does_not_abort_run(self, tmp_path: Path) -> None:
        from unittest.mock import patch

        config = _config(tmp_path, max_prime_ticks=1, generate_report=True)
        with patch("experiments.report.ReportGenerator", side_effect=RuntimeError("boom")):
            summary = ExperimentRunner(config).run()

        assert summary["status"] == "completed"
        assert not (tmp_path / "artifacts" / "test_run" / "report.md").exists()

    def test_crystal_samples_while_running_forever(self, tmp_path: Path) -> None:
        config = _config(
            tmp_path,
            max_range=20,
            prime_interval_s=0.05,
            max_prime_ticks=None,
            crystal_samples=5,
            crystal_interval_s=0.0,
        )
        runner = ExperimentRunner(config)
        timer = threading.Timer(0.2, runner.token.cancel)
        timer.start()
        try:
            summary = runner.run()
        finally:
            timer.cancel()

        assert summary["status"] == "stopped"
        assert summary["ticks_completed"] >= 1
        crystal = read_jsonl(tmp_path / "artifacts" / "test_run" / "time_crystal.jsonl")
        assert len(crystal) == 5

    def test_crystal_error_propagates(self, tmp_path: Path) -> None:
        from unittest.mock import patch

        config = _config(tmp_path, max_prime_ticks=1, crystal_samples=2, crystal_interval_s=0.0)
        with patch.object(TimeCrystalMonitor, "record", side_effect=RuntimeError("clock broke")):
            with pytest.raises(RuntimeError, match="clock broke"):
                ExperimentRunner(config).run()
