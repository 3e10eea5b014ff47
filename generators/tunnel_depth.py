"""Singularity tunnel depth generator."""

from __future__ import annotations

import math
import random

from .base import BaseGenerator
from .schemas import DEFAULT_TUNNEL_STEPS, TunnelPoint

FLOAT64_LIMIT = 1e308


def tunnel_probability(base_depth: float) -> float:
    """Sigmoid-like ``1 / (1 + exp(base_depth / 10))``.

    Once ``exp`` would overflow the result is 0.0, the same value the
    direct form reaches through ``1 / (1 + inf)``.
    """

    try:
        return 1 / (1 + math.exp(base_depth / 10))
    except OverflowError:
        return 0.0


class TunnelDepthGenerator(BaseGenerator[list[TunnelPoint]]):
    """Produces one TunnelPoint per step ``t`` in ``[0, steps)``.

    The fluctuation term is the only random input; pass a seeded
    ``random.Random`` for reproducible output.
    """

    name = "tunnel_depth"

    def __init__(self, steps: int = DEFAULT_TUNNEL_STEPS, rng: random.Random | None = None) -> None:
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        self.steps = steps
        self.rng = rng or random.Random()

    def point_at(self, t: int) -> TunnelPoint:
        base_depth = math.exp(t / 10)
        probability = tunnel_probability(base_depth)

        fluctuation = math.sin(t * 0.5) * math.exp(t / 20) * (1 + probability * self.rng.random())
        lambda_value = 1 / (base_depth + 1) * (1 + probability)
        tunneling_effect = max(0.0, math.sin(t * 0.2) * (1 - lambda_value)) * 10

        return TunnelPoint(
            step=t,
            depth=-math.log10(lambda_value),
            fluctuation=fluctuation,
            lambda_value=lambda_value,
            tunneling_effect=tunneling_effect,
            limit_exceeded=base_depth > FLOAT64_LIMIT,
        )

    def generate(self) -> list[TunnelPoint]:  # pyright: ignore[reportImplicitOverride]
        return [self.point_at(t) for t in range(self.steps)]
