import random

import pytest

from experiments.plotting import PlotGenerator
from generators.prime_field import PrimeFieldGenerator
from generators.time_crystal import TimeCrystalMonitor
from generators.tunnel_depth import TunnelDepthGenerator


@pytest.fixture
def sample_points():
    return [p.to_dict() for p in PrimeFieldGenerator(max_range=60).generate().points]


@pytest.fixture
def sample_tunnel():
    return [p.to_dict() for p in TunnelDepthGenerator(rng=random.Random(5)).generate()]


@pytest.fixture
def sample_metrics():
    return [
        {
            "tick": 0,
            "decoding_rate": 28.3,
            "stability_index": 41.2,
            "lambda_stability": 37.9,
            "elapsed_ms": 3.2,
            "timestamp": "2026-02-01T10:00:00+00:00",
        },
        {
            "tick": 1,
            "decoding_rate": 28.3,
            "stability_index": 41.2,
            "lambda_stability": 37.9,
            "elapsed_ms": 2.9,
            "timestamp": "2026-02-01T10:00:05+00:00",
        },
    ]


def test_plot_prime_field(sample_points, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "prime_field.png"
    pg.plot_prime_field(sample_points, save_path)
    assert save_path.exists()


def test_plot_stability_metrics(sample_points, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "nested" / "stability.png"
    pg.plot_stability_metrics(sample_points, save_path)
    assert save_path.exists()


def test_plot_tunnel_depth(sample_tunnel, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "tunnel.png"
    pg.plot_tunnel_depth(sample_tunnel, save_path)
    assert save_path.exists()


def test_plot_time_crystal(tmp_path):
    monitor = TimeCrystalMonitor()
    for step in range(40):
        monitor.record(step * 0.05)
    samples = [s.to_dict() for s in monitor.snapshot()]

    pg = PlotGenerator()
    save_path = tmp_path / "crystal.png"
    pg.plot_time_crystal(samples, save_path)
    assert save_path.exists()


def test_plot_dashboard(sample_metrics, sample_points, sample_tunnel, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "dashboard.png"
    pg.plot_dashboard(sample_metrics, sample_points, sample_tunnel, save_path)
    assert save_path.exists()


def test_plot_dashboard_without_tunnel(sample_metrics, sample_points, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "dashboard.png"
    pg.plot_dashboard(sample_metrics, sample_points, [], save_path)
    assert save_path.exists()
