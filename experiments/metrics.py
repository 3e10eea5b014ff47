"""Per-tick metrics collection for prime field runs."""

from __future__ import annotations

import csv
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path

from generators.schemas import PrimeFieldSummary


@dataclass
class TickMetrics:
    tick: int
    decoding_rate: float
    accuracy: float
    resonance: float
    stability_index: float
    lambda_stability: float
    total_primes_found: int
    issues: dict[str, int]
    elapsed_ms: float
    timestamp: datetime
    tunnel_issues: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_summary(
        cls,
        tick: int,
        summary: PrimeFieldSummary,
        issues: dict[str, int],
        elapsed_ms: float,
        timestamp: datetime,
        tunnel_issues: dict[str, int] | None = None,
    ) -> "TickMetrics":
        return cls(
            tick=tick,
            decoding_rate=summary.decoding_rate,
            accuracy=summary.accuracy,
            resonance=summary.resonance,
            stability_index=summary.stability_index,
            lambda_stability=summary.lambda_stability,
            total_primes_found=summary.total_primes_found,
            issues=issues,
            elapsed_ms=elapsed_ms,
            timestamp=timestamp,
            tunnel_issues=dict(tunnel_issues or {}),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data


class MetricsCollector:
    def __init__(self):
        self.ticks: list[TickMetrics] = []

    def record_tick(self, metrics: TickMetrics) -> None:
        self.ticks.append(metrics)

    def export_csv(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if not self.ticks:
            return

        fieldnames = [
            'tick', 'decoding_rate', 'accuracy', 'resonance',
            'stability_index', 'lambda_stability', 'total_primes_found',
            'elapsed_ms', 'timestamp'
        ]

        with open(path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for tick_metrics in self.ticks:
                row = tick_metrics.to_dict()
                row.pop('issues', None)
                row.pop('tunnel_issues', None)
                writer.writerow(row)

    @property
    def latest(self) -> TickMetrics | None:
        return self.ticks[-1] if self.ticks else None
