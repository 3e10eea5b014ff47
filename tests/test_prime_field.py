"""Tests for the lambda-stabilized prime field generator."""

from __future__ import annotations

import math

import pytest

from generators.prime_field import (
    PrimeFieldGenerator,
    quantum_field,
    stabilize_lambda,
    zeta_alignment,
)
from generators.schemas import DEFAULT_BASE_LAMBDA, DEFAULT_REFERENCE_ZEROS


@pytest.fixture(scope="module")
def full_result():
    return PrimeFieldGenerator(max_range=1000).generate()


class TestFieldFunctions:
    def test_quantum_field_single_zero(self) -> None:
        expected = math.exp(-((5 % 14.0) / 14.0) ** 2) * 0.5
        assert quantum_field(5, 0.5, [14.0]) == pytest.approx(expected)

    def test_quantum_field_scales_with_lambda_per_zero(self) -> None:
        zeros = [14.0, 21.0, 25.0]
        assert quantum_field(3, 0.5, zeros) == pytest.approx(quantum_field(3, 1.0, zeros) * 0.5**3)

    def test_zeta_alignment_in_unit_interval(self) -> None:
        for x in range(1, 200):
            assert 0 < zeta_alignment(x, DEFAULT_REFERENCE_ZEROS) < 1

    def test_stabilize_lambda_prime_enhancement(self) -> None:
        _, prime_metrics = stabilize_lambda(7, 0.5, True, DEFAULT_REFERENCE_ZEROS)
        _, composite_metrics = stabilize_lambda(7, 0.5, False, DEFAULT_REFERENCE_ZEROS)

        assert prime_metrics.prime_enhancement == 1.0
        assert composite_metrics.prime_enhancement == pytest.approx(math.exp(-49 / 1000))

    def test_stabilize_lambda_returns_scaled_stability(self) -> None:
        new_lambda, metrics = stabilize_lambda(3, 0.8, True, DEFAULT_REFERENCE_ZEROS, 0.9)

        product = (
            metrics.phase_coherence
            * metrics.noise_reduction
            * metrics.prime_enhancement
            * metrics.zeta_alignment
        )
        assert metrics.stability_factor == pytest.approx(math.exp(-((1 - product) ** 2)))
        assert new_lambda == pytest.approx(0.9 * metrics.stability_factor)


class TestPrimeFieldGenerator:
    def test_small_range(self) -> None:
        result = PrimeFieldGenerator(max_range=10).generate()

        assert result.primes == (2, 3, 5, 7)
        assert len(result.points) == 10
        assert [p.x for p in result.points] == list(range(1, 11))
        assert [p.is_prime for p in result.points] == [
            False, True, True, False, True, False, True, False, False, False
        ]
        assert result.summary.total_primes_found == 4
        assert result.summary.decoding_rate == pytest.approx(40.0)

    def test_repeated_runs_are_identical(self) -> None:
        generator = PrimeFieldGenerator(max_range=200)
        first = generator.generate()
        second = generator.generate()

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_fresh_generator_matches(self) -> None:
        assert PrimeFieldGenerator(max_range=50).generate() == PrimeFieldGenerator(max_range=50).generate()

    def test_decoding_rate_full_range(self, full_result) -> None:
        assert full_result.summary.total_primes_found == 168
        assert len(full_result.primes) == 168
        assert full_result.summary.decoding_rate == pytest.approx(16.8)

    def test_stability_and_lambda_bounds(self, full_result) -> None:
        for point in full_result.points:
            assert 0 < point.stability <= DEFAULT_BASE_LAMBDA
            assert 0 < point.lambda_value <= DEFAULT_BASE_LAMBDA

    def test_all_values_finite(self, full_result) -> None:
        for point in full_result.points:
            for value in (point.initial_field, point.final_field, point.tunnel_effect, point.alignment):
                assert math.isfinite(value)

    def test_first_points(self, full_result) -> None:
        assert full_result.points[0].x == 1
        assert full_result.points[0].is_prime is False
        assert full_result.points[1].is_prime is True

    def test_summary_uses_last_point(self, full_result) -> None:
        last = full_result.points[-1]
        summary = full_result.summary

        assert summary.accuracy == pytest.approx(last.alignment * 100)
        assert summary.resonance == pytest.approx(last.final_field * 100)
        assert summary.lambda_stability == pytest.approx(last.lambda_value * 100)
        assert 0 <= summary.stability_index <= 100

    def test_lambda_resets_between_runs(self) -> None:
        short = PrimeFieldGenerator(max_range=5).generate()
        long = PrimeFieldGenerator(max_range=20).generate()

        assert long.points[:5] == short.points

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_range": 0},
            {"reference_zeros": []},
            {"reference_zeros": [14.13, 0.0]},
        ],
    )
    def test_invalid_parameters(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            PrimeFieldGenerator(**kwargs)
