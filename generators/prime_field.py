"""Lambda-stabilized prime field generator.

Walks the integers 1..N, evaluating a periodic-modulus field against a fixed
set of reference zeros and threading a damping factor (lambda) from one step
to the next. The formulas are decorative: they are reproduced exactly and
must not be simplified.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .base import BaseGenerator
from .primes import is_prime
from .schemas import (
    DEFAULT_BASE_LAMBDA,
    DEFAULT_MAX_RANGE,
    DEFAULT_REFERENCE_ZEROS,
    PrimeFieldResult,
    PrimeFieldSummary,
    SequencePoint,
    StabilityMetrics,
)

PHASE_COHERENCE_WIDTH = 0.01
PRIME_ENHANCEMENT_SCALE = 1000.0


def _resonance(x: int, zero: float) -> float:
    return math.exp(-(((x % zero) / zero) ** 2))


def quantum_field(x: int, lambda_value: float, zeros: Sequence[float]) -> float:
    """Product over the zeros of ``exp(-((x mod z)/z)^2) * lambda``."""

    field = 1.0
    for zero in zeros:
        field *= _resonance(x, zero) * lambda_value
    return field


def zeta_alignment(x: int, zeros: Sequence[float]) -> float:
    alignment = 1.0
    for zero in zeros:
        alignment = alignment * (_resonance(x, zero) + 1) / 2
    return alignment


def stabilize_lambda(
    x: int,
    current_field: float,
    prime_state: bool,
    zeros: Sequence[float],
    base_lambda: float = DEFAULT_BASE_LAMBDA,
) -> tuple[float, StabilityMetrics]:
    """Compute the next lambda from the field seen at ``x``.

    Returns the new lambda together with the four sub-factors and the
    stability factor they combine into.
    """

    phase_coherence = math.exp(-((1 - current_field) ** 2) / PHASE_COHERENCE_WIDTH)
    noise_reduction = 1 - math.exp(-x * base_lambda)
    prime_enhancement = 1.0 if prime_state else math.exp(-(x**2) / PRIME_ENHANCEMENT_SCALE)
    alignment = zeta_alignment(x, zeros)

    stability_factor = math.exp(
        -((1 - phase_coherence * noise_reduction * prime_enhancement * alignment) ** 2)
    )

    metrics = StabilityMetrics(
        phase_coherence=phase_coherence,
        noise_reduction=noise_reduction,
        prime_enhancement=prime_enhancement,
        zeta_alignment=alignment,
        stability_factor=stability_factor,
    )
    return base_lambda * stability_factor, metrics


class PrimeFieldGenerator(BaseGenerator[PrimeFieldResult]):
    """Regenerates the full prime field sequence on every call."""

    name = "prime_field"

    def __init__(
        self,
        max_range: int = DEFAULT_MAX_RANGE,
        reference_zeros: Sequence[float] = DEFAULT_REFERENCE_ZEROS,
        base_lambda: float = DEFAULT_BASE_LAMBDA,
    ) -> None:
        if max_range < 1:
            raise ValueError(f"max_range must be at least 1, got {max_range}")
        if not reference_zeros:
            raise ValueError("reference_zeros must not be empty")
        if any(zero <= 0 for zero in reference_zeros):
            raise ValueError("reference_zeros must all be positive")

        self.max_range = max_range
        self.reference_zeros: tuple[float, ...] = tuple(reference_zeros)
        self.base_lambda = base_lambda

    def generate(self) -> PrimeFieldResult:  # pyright: ignore[reportImplicitOverride]
        points: list[SequencePoint] = []
        primes: list[int] = []

        current_lambda = self.base_lambda
        cumulative_stability = 1.0

        for x in range(1, self.max_range + 1):
            prime_state = is_prime(x)

            initial_field = quantum_field(x, current_lambda, self.reference_zeros)
            current_lambda, metrics = stabilize_lambda(
                x,
                initial_field,
                prime_state,
                self.reference_zeros,
                self.base_lambda,
            )
            final_field = quantum_field(x, current_lambda, self.reference_zeros)

            tunnel_effect = math.exp(-(((1 - current_lambda) * x) ** 2))
            alignment = (final_field * metrics.stability_factor * tunnel_effect) ** (1 / 3)

            if prime_state:
                primes.append(x)

            cumulative_stability *= metrics.stability_factor

            points.append(
                SequencePoint(
                    x=x,
                    initial_field=initial_field,
                    final_field=final_field,
                    lambda_value=current_lambda,
                    stability=metrics.stability_factor,
                    phase_coherence=metrics.phase_coherence,
                    zeta_alignment=metrics.zeta_alignment,
                    tunnel_effect=tunnel_effect,
                    alignment=alignment,
                    is_prime=prime_state,
                )
            )

        summary = self._summarize(points, primes, cumulative_stability)
        return PrimeFieldResult(points=tuple(points), primes=tuple(primes), summary=summary)

    def _summarize(
        self,
        points: list[SequencePoint],
        primes: list[int],
        cumulative_stability: float,
    ) -> PrimeFieldSummary:
        last_point = points[-1]
        return PrimeFieldSummary(
            decoding_rate=(len(primes) / self.max_range) * 100,
            accuracy=last_point.alignment * 100,
            resonance=last_point.final_field * 100,
            stability_index=cumulative_stability ** (1 / self.max_range) * 100,
            total_primes_found=len(primes),
            lambda_stability=last_point.lambda_value * 100,
        )
