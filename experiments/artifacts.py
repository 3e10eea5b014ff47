"""Artifact management for generator runs."""

from __future__ import annotations

import csv
import json
import os
import tempfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import IO, Any

from generators.schemas import CrystalSample, PrimeFieldResult, SequencePoint, TunnelPoint
from experiments.config import ExperimentConfig

PRIME_FIELD_CSV_FIELDS = list(SequencePoint.model_fields)


def _atomic_write(path: Path, write: Callable[[IO[str]], Any]) -> None:
    """Write through a temp file in the same directory, then replace ``path``."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="") as f:
            write(f)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _write_jsonl(path: Path, records: Iterable[dict[str, Any]]) -> None:
    def write(f: IO[str]) -> None:
        for record in records:
            f.write(json.dumps(record) + "\n")

    _atomic_write(path, write)


def read_jsonl(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    records = []
    with open(path, "r") as f:
        for line in f:
            if line.strip():
                records.append(json.loads(line))
    return records


class ArtifactManager:
    """Manages run artifacts: config snapshot, sequence exports, metrics and plots."""

    def __init__(self, config: ExperimentConfig):
        self.config = config
        self.run_dir = Path(config.artifact_dir) / config.run_id
        self.plots_dir = self.run_dir / "plots"

        self._create_directory_structure()

    def _create_directory_structure(self) -> None:
        """Create artifact directory structure for the run."""
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.plots_dir.mkdir(exist_ok=True)

    @property
    def config_path(self) -> Path:
        return self.run_dir / "config.yaml"

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.jsonl"

    @property
    def metrics_csv_path(self) -> Path:
        return self.run_dir / "metrics.csv"

    @property
    def prime_field_path(self) -> Path:
        return self.run_dir / "prime_field.jsonl"

    @property
    def prime_field_csv_path(self) -> Path:
        return self.run_dir / "prime_field.csv"

    @property
    def primes_path(self) -> Path:
        return self.run_dir / "primes.json"

    @property
    def tunnel_depth_path(self) -> Path:
        return self.run_dir / "tunnel_depth.jsonl"

    @property
    def time_crystal_path(self) -> Path:
        return self.run_dir / "time_crystal.jsonl"

    def snapshot_config(self) -> None:
        """Save a snapshot of the configuration for reproducibility."""
        from experiments.config import save_config
        save_config(self.config, self.config_path)

    def reset_metrics(self) -> None:
        """Drop metrics left by an earlier run with the same run_id."""
        self.metrics_path.unlink(missing_ok=True)

    def save_tick_metrics(self, metrics_entry: dict[str, Any]) -> None:
        with open(self.metrics_path, "a") as f:
            f.write(json.dumps(metrics_entry) + "\n")

    def save_prime_field(self, result: PrimeFieldResult) -> None:
        """Replace the stored sequence with a freshly generated one.

        Each file is swapped in whole, so readers only ever see a complete
        sequence from a single tick.
        """
        _write_jsonl(self.prime_field_path, (p.to_dict() for p in result.points))

        def write_csv(f: IO[str]) -> None:
            writer = csv.DictWriter(f, fieldnames=PRIME_FIELD_CSV_FIELDS)
            writer.writeheader()
            for point in result.points:
                writer.writerow(point.to_dict())

        _atomic_write(self.prime_field_csv_path, write_csv)

        payload = {
            "primes": list(result.primes),
            "summary": result.summary.to_dict(),
        }
        _atomic_write(self.primes_path, lambda f: json.dump(payload, f, indent=2))

    def save_tunnel_depth(self, points: list[TunnelPoint]) -> None:
        _write_jsonl(self.tunnel_depth_path, (p.to_dict() for p in points))

    def save_time_crystal(self, samples: list[CrystalSample]) -> None:
        _write_jsonl(self.time_crystal_path, (s.to_dict() for s in samples))

    def load_metrics(self) -> list[dict[str, Any]]:
        """Load all tick metrics from the JSONL file."""
        return read_jsonl(self.metrics_path)

    def load_prime_field(self) -> list[dict[str, Any]]:
        return read_jsonl(self.prime_field_path)

    def load_primes(self) -> dict[str, Any]:
        if not self.primes_path.exists():
            return {"primes": [], "summary": {}}
        with open(self.primes_path, "r") as f:
            return json.load(f)

    def load_tunnel_depth(self) -> list[dict[str, Any]]:
        return read_jsonl(self.tunnel_depth_path)

    def load_time_crystal(self) -> list[dict[str, Any]]:
        return read_jsonl(self.time_crystal_path)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the run.

        Returns:
            Dictionary with run statistics
        """
        metrics = self.load_metrics()

        if not metrics:
            return {
                "run_id": self.config.run_id,
                "status": "no_data",
                "ticks_completed": 0,
            }

        last_tick = metrics[-1]
        max_ticks = self.config.max_prime_ticks

        if max_ticks is None:
            status = "stopped"
        elif len(metrics) >= max_ticks:
            status = "completed"
        else:
            status = "interrupted"

        return {
            "run_id": self.config.run_id,
            "status": status,
            "ticks_completed": len(metrics),
            "max_ticks": max_ticks,
            "decoding_rate": last_tick.get("decoding_rate"),
            "stability_index": last_tick.get("stability_index"),
            "lambda_stability": last_tick.get("lambda_stability"),
            "total_primes_found": last_tick.get("total_primes_found"),
            "numeric_issues": sum(last_tick.get("issues", {}).values()),
            "tunnel_issues": sum(last_tick.get("tunnel_issues", {}).values()),
            "last_timestamp": last_tick.get("timestamp"),
            "has_tunnel_depth": self.tunnel_depth_path.exists(),
        }
