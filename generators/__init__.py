"""
Generators Module

Numeric sequence producers behind the lambda field dashboards.

This module provides:
- Lambda-stabilized prime field sequence (periodic regeneration)
- Singularity tunnel depth curve (single-shot, seeded randomness)
- Time crystal telemetry sampler with rolling history
- Pydantic schemas for every produced record
"""

__version__ = "0.1.0"

from .prime_field import PrimeFieldGenerator
from .primes import is_prime
from .schemas import (
    CrystalSample,
    PrimeFieldResult,
    PrimeFieldSummary,
    RunConfig,
    SequencePoint,
    TunnelPoint,
)
from .time_crystal import TimeCrystalMonitor
from .tunnel_depth import TunnelDepthGenerator

__all__ = [
    "CrystalSample",
    "PrimeFieldGenerator",
    "PrimeFieldResult",
    "PrimeFieldSummary",
    "RunConfig",
    "SequencePoint",
    "TimeCrystalMonitor",
    "TunnelDepthGenerator",
    "TunnelPoint",
    "is_prime",
]
