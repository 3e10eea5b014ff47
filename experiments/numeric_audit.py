"""Numeric edge-case classification for generated sequences."""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum

from generators.schemas import DEFAULT_BASE_LAMBDA, SequencePoint, TunnelPoint


class NumericIssueType(str, Enum):
    NAN = "nan"
    INFINITE = "infinite"
    OUT_OF_BOUNDS = "out_of_bounds"
    NEGATIVE = "negative"
    LIMIT_EXCEEDED = "limit_exceeded"


_PRIME_FIELD_VALUES = (
    "initial_field",
    "final_field",
    "lambda_value",
    "stability",
    "phase_coherence",
    "zeta_alignment",
    "tunnel_effect",
    "alignment",
)

_TUNNEL_VALUES = ("depth", "fluctuation", "lambda_value", "tunneling_effect")


class NumericAuditor:
    """Counts NaN/Infinity leaks and broken bounds across sequences."""

    def __init__(self, base_lambda: float = DEFAULT_BASE_LAMBDA):
        self.base_lambda = base_lambda
        self.issues: dict[NumericIssueType, int] = {it: 0 for it in NumericIssueType}
        self.examples: list[str] = []

    def classify_value(self, value: float) -> NumericIssueType | None:
        if math.isnan(value):
            return NumericIssueType.NAN
        if math.isinf(value):
            return NumericIssueType.INFINITE
        return None

    def record_issue(self, issue: NumericIssueType, where: str) -> None:
        self.issues[issue] += 1
        if len(self.examples) < 20:
            self.examples.append(f"{issue.value}: {where}")

    def audit_prime_field(self, points: Iterable[SequencePoint]) -> int:
        """Check every field is finite and stability/lambda stay in (0, base_lambda]."""
        found = 0
        for point in points:
            for name in _PRIME_FIELD_VALUES:
                issue = self.classify_value(getattr(point, name))
                if issue is not None:
                    self.record_issue(issue, f"x={point.x} {name}")
                    found += 1

            for name in ("stability", "lambda_value"):
                value = getattr(point, name)
                if math.isfinite(value) and not 0 < value <= self.base_lambda:
                    self.record_issue(NumericIssueType.OUT_OF_BOUNDS, f"x={point.x} {name}={value}")
                    found += 1
        return found

    def audit_tunnel(self, points: Iterable[TunnelPoint]) -> int:
        """Check tunnel values are finite, depth non-negative, and no limit flag set."""
        found = 0
        for point in points:
            for name in _TUNNEL_VALUES:
                issue = self.classify_value(getattr(point, name))
                if issue is not None:
                    self.record_issue(issue, f"t={point.step} {name}")
                    found += 1

            if math.isfinite(point.depth) and point.depth < 0:
                self.record_issue(NumericIssueType.NEGATIVE, f"t={point.step} depth={point.depth}")
                found += 1
            if point.limit_exceeded:
                self.record_issue(NumericIssueType.LIMIT_EXCEEDED, f"t={point.step}")
                found += 1
        return found

    @property
    def total(self) -> int:
        return sum(self.issues.values())

    def get_issue_stats(self) -> dict[str, int]:
        return {it.value: count for it, count in self.issues.items()}

    def get_top_issues(self, n: int = 5) -> list[tuple[str, int]]:
        sorted_issues = sorted(
            self.issues.items(),
            key=lambda x: x[1],
            reverse=True
        )
        return [(it.value, count) for it, count in sorted_issues[:n]]

    def reset(self) -> None:
        self.issues = {it: 0 for it in NumericIssueType}
        self.examples = []
