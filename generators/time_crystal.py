"""Time crystal telemetry driven by a wall-clock timestamp."""

from __future__ import annotations

import math
import time
from collections import deque
from collections.abc import Callable

from .base import BaseGenerator
from .schemas import CrystalSample, CrystalStatus

PHI = (1 + math.sqrt(5)) / 2
CRITICAL_COUPLING = 0.99999
LAMBDA_CRITICAL = 0.5
SAFETY_MARGIN = 1e-10
PURITY_THRESHOLD = 0.9995
CRITICAL_PURITY = 0.995
CRITICAL_LAMBDA_DEVIATION = 0.001
# Previous 100 samples plus the newest one.
HISTORY_LIMIT = 101


def sample_crystal(t: float) -> CrystalSample:
    """Evaluate every crystal metric at timestamp ``t`` (seconds)."""

    stability_factor = math.exp(-(math.sin(t / PHI) ** 2))
    resonance = 1 - 0.00001 * math.sin(t / (2 * PHI))
    base_coupling = CRITICAL_COUPLING + 0.00001 * math.sin(t / 30)
    base_purity = 0.99999 * resonance * stability_factor

    needs_reinforcement = base_purity < PURITY_THRESHOLD
    reinforcement_strength = (
        min(1.0, (PURITY_THRESHOLD - base_purity) * 10) if needs_reinforcement else 0.0
    )
    purity = (
        base_purity + (1 - base_purity) * reinforcement_strength
        if needs_reinforcement
        else base_purity
    )

    lambda_correction = 0.00001 * math.sin(t * PHI) * math.cos(t / PHI)
    lambda_value = LAMBDA_CRITICAL + lambda_correction

    critical_event = (
        abs(lambda_value - LAMBDA_CRITICAL) > CRITICAL_LAMBDA_DEVIATION
        or base_purity < CRITICAL_PURITY
    )

    status = CrystalStatus(
        reinforcement_active=needs_reinforcement,
        reinforcement_strength=reinforcement_strength,
        status_message="Critical Event Detected" if critical_event else "Stable",
        critical_event=critical_event,
    )

    return CrystalSample(
        timestamp=t,
        lambda_stability=lambda_value,
        quantum_coupling=base_coupling * stability_factor,
        phase_stability=0.95 * stability_factor,
        reality_integrity=0.5 * stability_factor,
        time_warp=0.8 * stability_factor,
        coherence=0.99995 * stability_factor,
        energy_state=0.9995 + 0.0005 * math.sin(t / 20),
        purity_level=purity,
        stability_index=stability_factor,
        error_rate=(1 - stability_factor) * 1e-5,
        status=status,
    )


class TimeCrystalMonitor(BaseGenerator[CrystalSample]):
    """Samples crystal metrics and keeps a bounded rolling history."""

    name = "time_crystal"

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {history_limit}")
        self.clock = clock or time.time
        self.history: deque[CrystalSample] = deque(maxlen=history_limit)

    def generate(self) -> CrystalSample:  # pyright: ignore[reportImplicitOverride]
        return sample_crystal(self.clock())

    def record(self, t: float | None = None) -> CrystalSample:
        sample = sample_crystal(self.clock() if t is None else t)
        self.history.append(sample)
        return sample

    @property
    def latest(self) -> CrystalSample | None:
        return self.history[-1] if self.history else None

    def snapshot(self) -> list[CrystalSample]:
        return list(self.history)
