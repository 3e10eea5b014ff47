"""Run comparison functionality for run artifacts."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

import yaml

from experiments.artifacts import read_jsonl

logger = logging.getLogger(__name__)

COMPARE_FIELDS = [
    "run_id",
    "max_range",
    "decoding_rate",
    "stability_index",
    "lambda_stability",
    "total_primes_found",
    "avg_elapsed_ms",
    "ticks_completed",
]

# Fields that differ on every run and say nothing about the setup
_IGNORED_CONFIG_KEYS = {"run_id", "artifact_dir"}


class RunComparator:

    def __init__(self, artifacts_root: Path):
        self.artifacts_root = Path(artifacts_root)

    def compare(self, run_ids: list[str]) -> dict[str, Any]:
        runs = []
        warnings = []

        for run_id in run_ids:
            run_dir = self.artifacts_root / run_id

            if not run_dir.exists():
                warning_msg = f"Run directory not found: {run_id}"
                logger.warning(warning_msg)
                warnings.append(warning_msg)
                continue

            try:
                run_data = self._load_run_data(run_dir, run_id)
                if run_data:
                    runs.append(run_data)
            except Exception as e:
                warning_msg = f"Failed to load run {run_id}: {e}"
                logger.warning(warning_msg)
                warnings.append(warning_msg)

        comparison: dict[str, Any] = {"runs": runs}

        if warnings:
            comparison["warnings"] = warnings

        if runs:
            most_stable = max(runs, key=lambda r: r["stability_index"])
            comparison["stability_winner"] = most_stable["run_id"]

            comparison["config_differences"] = self._compute_config_differences(runs)

        return comparison

    def _load_run_data(self, run_dir: Path, run_id: str) -> dict[str, Any] | None:
        config_path = run_dir / "config.yaml"
        metrics_path = run_dir / "metrics.jsonl"

        if not config_path.exists():
            logger.warning(f"Config not found for {run_id}")
            return None

        if not metrics_path.exists():
            logger.warning(f"Metrics not found for {run_id}")
            return None

        with open(config_path, "r") as f:
            config = yaml.safe_load(f)

        metrics = read_jsonl(metrics_path)
        if not metrics:
            return None

        last_metric = metrics[-1]
        elapsed = [m["elapsed_ms"] for m in metrics if m.get("elapsed_ms") is not None]

        return {
            "run_id": run_id,
            "max_range": config.get("max_range"),
            "decoding_rate": last_metric.get("decoding_rate", 0.0),
            "stability_index": last_metric.get("stability_index", 0.0),
            "lambda_stability": last_metric.get("lambda_stability", 0.0),
            "total_primes_found": last_metric.get("total_primes_found", 0),
            "avg_elapsed_ms": sum(elapsed) / len(elapsed) if elapsed else 0.0,
            "ticks_completed": len(metrics),
            "config": config,
        }

    def _compute_config_differences(self, runs: list[dict[str, Any]]) -> dict[str, list[Any]]:
        if not runs:
            return {}

        all_keys = set()
        for run in runs:
            all_keys.update(run["config"].keys())

        differences = {}

        for key in sorted(all_keys - _IGNORED_CONFIG_KEYS):
            values = [run["config"].get(key) for run in runs]

            if len(set(str(v) for v in values)) > 1:
                differences[key] = values

        return differences

    def export_markdown(self, comparison: dict[str, Any], output_path: Path) -> None:
        runs = comparison.get("runs", [])

        lines = ["# Run Comparison Report", ""]

        if not runs:
            lines.append("No runs to compare.")
            Path(output_path).write_text("\n".join(lines), encoding="utf-8")
            return

        lines.append("## Summary")
        lines.append("")
        lines.append("| Run ID | Range | Decoding Rate | Stability | λ Stability | Primes | Avg Time (ms) | Ticks |")
        lines.append("|--------|-------|---------------|-----------|-------------|--------|---------------|-------|")

        stability_winner = comparison.get("stability_winner")

        for run in runs:
            winner_marker = " 🏆" if run["run_id"] == stability_winner else ""
            lines.append(
                f"| {run['run_id']}{winner_marker} | {run['max_range']} | "
                f"{run['decoding_rate']:.6f}% | {run['stability_index']:.6f}% | "
                f"{run['lambda_stability']:.6f}% | {run['total_primes_found']} | "
                f"{run['avg_elapsed_ms']:.2f} | {run['ticks_completed']} |"
            )

        lines.append("")

        config_diffs = comparison.get("config_differences", {})
        if config_diffs:
            lines.append("## Config Differences")
            lines.append("")
            lines.append("| Parameter | " + " | ".join(r["run_id"] for r in runs) + " |")
            lines.append("|" + "---|" * (len(runs) + 1))

            for key, values in config_diffs.items():
                values_str = " | ".join(str(v) for v in values)
                lines.append(f"| {key} | {values_str} |")

            lines.append("")

        warnings = comparison.get("warnings", [])
        if warnings:
            lines.append("## Warnings")
            lines.append("")
            for warning in warnings:
                lines.append(f"- {warning}")
            lines.append("")

        Path(output_path).write_text("\n".join(lines), encoding="utf-8")

    def export_csv(self, comparison: dict[str, Any], output_path: Path) -> None:
        runs = comparison.get("runs", [])

        if not runs:
            return

        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=COMPARE_FIELDS)
            writer.writeheader()

            for run in runs:
                row = {key: run[key] for key in COMPARE_FIELDS}
                writer.writerow(row)
