"""Runs summary table generator for run artifacts."""

from __future__ import annotations

import csv
import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from experiments.artifacts import read_jsonl

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = [
    "run_id",
    "timestamp_start",
    "timestamp_end",
    "max_range",
    "ticks_completed",
    "decoding_rate",
    "stability_index",
    "lambda_stability",
    "total_primes_found",
    "numeric_issues",
    "config_hash",
]


class RunsSummarizer:
    """Scans artifacts directory and generates summary tables."""

    def __init__(self, artifacts_root: Path):
        """Initialize summarizer with artifacts root directory.

        Args:
            artifacts_root: Path to artifacts directory containing run folders
        """
        self.artifacts_root = Path(artifacts_root)

    def scan_runs(self) -> list[dict[str, Any]]:
        """Scan artifacts directory and collect metadata from all runs.

        Returns:
            List of run summaries, sorted by timestamp (newest first)
        """
        runs = []

        if not self.artifacts_root.exists():
            return runs

        for run_dir in self.artifacts_root.iterdir():
            if not run_dir.is_dir():
                continue

            try:
                run_summary = self._process_run(run_dir)
                if run_summary:
                    runs.append(run_summary)
            except Exception as e:
                logger.warning(f"Failed to process run {run_dir.name}: {e}")

        runs.sort(key=lambda r: r["timestamp_start"], reverse=True)

        return runs

    def _process_run(self, run_dir: Path) -> dict[str, Any] | None:
        config_path = run_dir / "config.yaml"

        if not config_path.exists():
            logger.warning(f"Skipping {run_dir.name}: config.yaml not found")
            return None

        with open(config_path, "r") as f:
            config = yaml.safe_load(f)

        metrics = read_jsonl(run_dir / "metrics.jsonl")

        if not metrics:
            logger.warning(f"Skipping {run_dir.name}: no metrics found")
            return None

        first_metric = metrics[0]
        last_metric = metrics[-1]

        return {
            "run_id": config.get("run_id", run_dir.name),
            "timestamp_start": first_metric["timestamp"],
            "timestamp_end": last_metric["timestamp"],
            "max_range": config.get("max_range"),
            "ticks_completed": len(metrics),
            "decoding_rate": last_metric.get("decoding_rate"),
            "stability_index": last_metric.get("stability_index"),
            "lambda_stability": last_metric.get("lambda_stability"),
            "total_primes_found": last_metric.get("total_primes_found"),
            "numeric_issues": sum(last_metric.get("issues", {}).values()),
            "config_hash": self._compute_config_hash(config),
        }

    def _compute_config_hash(self, config: dict[str, Any]) -> str:
        """Hash the fields that change generated values, for grouping similar runs.

        Returns:
            8-character hex hash string
        """
        relevant_fields = {
            "max_range": config.get("max_range"),
            "reference_zeros": config.get("reference_zeros"),
            "base_lambda": config.get("base_lambda"),
            "tunnel_steps": config.get("tunnel_steps"),
            "seed": config.get("seed"),
        }

        hash_input = json.dumps(relevant_fields, sort_keys=True).encode()
        return hashlib.sha256(hash_input).hexdigest()[:8]

    def export_csv(self, output_path: Path) -> None:
        runs = self.scan_runs()

        if not runs:
            return

        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS)
            writer.writeheader()
            writer.writerows(runs)

    def export_json(self, output_path: Path) -> None:
        runs = self.scan_runs()

        with open(output_path, "w") as f:
            json.dump(runs, f, indent=2)
