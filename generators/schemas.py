from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# First six non-trivial zeta zeros (imaginary parts), to double precision.
DEFAULT_REFERENCE_ZEROS: tuple[float, ...] = (
    14.134725141734693790457251983562470270784257115699243,
    21.022039638771554992628479593896902777334340524902781,
    25.010857580145688763213790992562821818659549672557996,
    30.424876125859513210311897530584091320181560023715390,
    32.935061587739189690662368964074903488812715603517039,
    37.586178158825671257217763480705332821405597350830793,
)
DEFAULT_BASE_LAMBDA = 0.99999999999
DEFAULT_MAX_RANGE = 1000
DEFAULT_TUNNEL_STEPS = 100
# exp(t/10) leaves float range just past t = 7097
MAX_TUNNEL_STEPS = 7000


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class FrozenSchema(BaseSchema):
    model_config = ConfigDict(frozen=True)


class StabilityMetrics(FrozenSchema):
    phase_coherence: float
    noise_reduction: float
    prime_enhancement: float
    zeta_alignment: float
    stability_factor: float


class SequencePoint(FrozenSchema):
    x: int = Field(ge=1)
    initial_field: float
    final_field: float
    lambda_value: float
    stability: float
    phase_coherence: float
    zeta_alignment: float
    tunnel_effect: float
    alignment: float
    is_prime: bool


class PrimeFieldSummary(FrozenSchema):
    decoding_rate: float
    accuracy: float
    resonance: float
    stability_index: float
    total_primes_found: int = Field(ge=0)
    lambda_stability: float


class PrimeFieldResult(FrozenSchema):
    points: tuple[SequencePoint, ...]
    primes: tuple[int, ...]
    summary: PrimeFieldSummary


class TunnelPoint(FrozenSchema):
    step: int = Field(ge=0)
    depth: float
    fluctuation: float
    lambda_value: float
    tunneling_effect: float
    limit_exceeded: bool


class CrystalStatus(FrozenSchema):
    reinforcement_active: bool
    reinforcement_strength: float
    status_message: str
    critical_event: bool


class CrystalSample(FrozenSchema):
    timestamp: float
    lambda_stability: float
    quantum_coupling: float
    phase_stability: float
    reality_integrity: float
    time_warp: float
    coherence: float
    energy_state: float
    purity_level: float
    stability_index: float
    error_rate: float
    status: CrystalStatus


class RunConfig(BaseSchema):
    run_id: str
    seed: int
    max_range: int = Field(default=DEFAULT_MAX_RANGE, ge=1)
    reference_zeros: list[float] = Field(
        default_factory=lambda: list(DEFAULT_REFERENCE_ZEROS), min_length=1
    )
    base_lambda: float = Field(default=DEFAULT_BASE_LAMBDA, gt=0.0, le=1.0)
    tunnel_steps: int = Field(default=DEFAULT_TUNNEL_STEPS, ge=1, le=MAX_TUNNEL_STEPS)

    @field_validator("reference_zeros")
    @classmethod
    def zeros_positive(cls, value: list[float]) -> list[float]:
        if any(z <= 0 for z in value):
            raise ValueError("reference_zeros must all be positive")
        return value
