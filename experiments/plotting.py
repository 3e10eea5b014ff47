"""Visualization and plotting for generator runs."""

from __future__ import annotations

from pathlib import Path

try:
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False

from generators.time_crystal import LAMBDA_CRITICAL

VIOLET = '#8B5CF6'
PINK = '#EC4899'
BLUE = '#60A5FA'
GREEN = '#34D399'


def _column(rows: list[dict], key: str) -> list:
    return [r.get(key) for r in rows]


class PlotGenerator:
    def __init__(self):
        if not MATPLOTLIB_AVAILABLE:
            raise ImportError("matplotlib is required for plotting")

    def _set_style(self) -> None:
        style = 'seaborn-v0_8-whitegrid' if 'seaborn-v0_8-whitegrid' in plt.style.available else 'ggplot'
        plt.style.use(style)

    def _reset_style(self) -> None:
        plt.style.use('default')

    def _save(self, save_path: Path) -> None:
        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close()
        self._reset_style()

    def plot_prime_field(self, points: list[dict], save_path: str | Path) -> None:
        """Initial vs stabilized field, lambda and alignment along the number line."""
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        xs = _column(points, 'x')

        plt.figure(figsize=(12, 6))
        plt.plot(xs, _column(points, 'initial_field'), color=VIOLET, label='Initial Field', linewidth=1)
        plt.plot(xs, _column(points, 'final_field'), color=PINK, label='Stabilized Field', linewidth=1)
        plt.plot(xs, _column(points, 'lambda_value'), color=BLUE, label='λ Value', linewidth=1)
        plt.plot(xs, _column(points, 'alignment'), color=GREEN, label='Alignment', linewidth=1)

        plt.ylim(0, 1)
        plt.xlabel('Number Line', fontsize=12)
        plt.title('Lambda-Stabilized Prime Field', fontsize=14, fontweight='bold')
        plt.legend(loc='best')
        plt.grid(True, alpha=0.3)
        self._save(save_path)

    def plot_stability_metrics(self, points: list[dict], save_path: str | Path) -> None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        xs = _column(points, 'x')

        plt.figure(figsize=(12, 6))
        plt.plot(xs, _column(points, 'stability'), color=VIOLET, label='λ Stability', linewidth=1)
        plt.plot(xs, _column(points, 'phase_coherence'), color=PINK, label='Phase Coherence', linewidth=1)
        plt.plot(xs, _column(points, 'zeta_alignment'), color=BLUE, label='Zeta Alignment', linewidth=1)
        plt.plot(xs, _column(points, 'tunnel_effect'), color=GREEN, label='Tunnel Effect', linewidth=1)

        plt.ylim(0, 1)
        plt.xlabel('Number Line', fontsize=12)
        plt.title('λ Stabilization Metrics', fontsize=14, fontweight='bold')
        plt.legend(loc='best')
        plt.grid(True, alpha=0.3)
        self._save(save_path)

    def plot_tunnel_depth(self, points: list[dict], save_path: str | Path) -> None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        steps = _column(points, 'step')

        plt.figure(figsize=(12, 6))
        plt.plot(steps, _column(points, 'depth'), 'r-', label='Tunnel Depth', linewidth=2)
        plt.plot(steps, _column(points, 'fluctuation'), 'g-', label='Quantum Fluctuations', alpha=0.8)
        plt.plot(steps, _column(points, 'tunneling_effect'), 'b-', label='Tunneling Effect', alpha=0.8)

        limit_steps = [p['step'] for p in points if p.get('limit_exceeded')]
        for step in limit_steps:
            plt.axvline(step, color='red', linestyle=':', alpha=0.5)

        plt.xlabel('Descent Steps', fontsize=12)
        plt.ylabel('Log10(Tunnel Depth)', fontsize=12)
        plt.title('Quantum Tunnel Depth', fontsize=14, fontweight='bold')
        plt.legend(loc='best')
        plt.grid(True, alpha=0.3)
        self._save(save_path)

    def plot_time_crystal(self, samples: list[dict], save_path: str | Path) -> None:
        """Lambda around its critical value, plus stability, purity and coherence."""
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        t0 = samples[0]['timestamp'] if samples else 0.0
        elapsed = [s['timestamp'] - t0 for s in samples]

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(15, 6))
        fig.suptitle('Quantum Time Crystal', fontsize=16, fontweight='bold')

        ax1.plot(elapsed, _column(samples, 'lambda_stability'), color=VIOLET, label='Lambda (λ)')
        ax1.axhline(LAMBDA_CRITICAL, color=PINK, linestyle='--', label=f'Critical λ={LAMBDA_CRITICAL}')
        ax1.axhspan(LAMBDA_CRITICAL - 0.0001, LAMBDA_CRITICAL + 0.0001, color=PINK, alpha=0.1)
        ax1.set_ylim(0.49, 0.51)
        ax1.set_xlabel('Elapsed (s)')
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2.plot(elapsed, _column(samples, 'stability_index'), color=PINK, label='Stability')
        ax2.plot(elapsed, _column(samples, 'purity_level'), color=BLUE, label='Purity')
        ax2.plot(elapsed, _column(samples, 'coherence'), color=GREEN, label='Coherence')
        ax2.set_ylim(0.9, 1)
        ax2.set_xlabel('Elapsed (s)')
        ax2.legend()
        ax2.grid(True, alpha=0.3)

        self._save(save_path)

    def plot_dashboard(
        self,
        metrics_data: list[dict],
        points: list[dict],
        tunnel: list[dict],
        save_path: str | Path,
    ) -> None:
        """Generate a multi-panel dashboard plot."""
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        fig, axes = plt.subplots(2, 2, figsize=(15, 12))
        fig.suptitle('Lambda Field Dashboard', fontsize=18, fontweight='bold')

        ax1 = axes[0, 0]
        xs = _column(points, 'x')
        ax1.plot(xs, _column(points, 'final_field'), color=PINK, label='Stabilized Field')
        ax1.plot(xs, _column(points, 'lambda_value'), color=BLUE, label='λ Value')
        prime_xs = [p['x'] for p in points if p.get('is_prime')]
        prime_fields = [p['final_field'] for p in points if p.get('is_prime')]
        if prime_xs:
            ax1.scatter(prime_xs, prime_fields, s=6, color=VIOLET, label='Primes')
        ax1.set_title('Prime Field', fontsize=14)
        ax1.set_xlabel('Number Line')
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2 = axes[0, 1]
        ticks = _column(metrics_data, 'tick')
        for key, label in (
            ('stability_index', 'Stability'),
            ('lambda_stability', 'λ Stability'),
            ('decoding_rate', 'Decoding Rate'),
        ):
            values = _column(metrics_data, key)
            if any(v is not None for v in values):
                ax2.plot(ticks, values, marker='o', label=label)
        ax2.set_title('Summary Metrics per Tick (%)', fontsize=14)
        ax2.set_xlabel('Tick')
        ax2.legend()
        ax2.grid(True, alpha=0.3)

        ax3 = axes[1, 0]
        steps = _column(tunnel, 'step')
        if steps:
            ax3.plot(steps, _column(tunnel, 'depth'), 'r-', label='Depth')
            ax3.plot(steps, _column(tunnel, 'tunneling_effect'), 'b-', label='Tunneling Effect')
            ax3.legend()
        ax3.set_title('Tunnel Depth', fontsize=14)
        ax3.set_xlabel('Step')
        ax3.grid(True, alpha=0.3)

        ax4 = axes[1, 1]
        elapsed = _column(metrics_data, 'elapsed_ms')
        if any(t is not None for t in elapsed):
            ax4.bar(ticks, elapsed, color='skyblue', alpha=0.7)
        ax4.set_title('Generation Time (ms)', fontsize=14)
        ax4.set_xlabel('Tick')
        ax4.grid(True, alpha=0.3)

        plt.tight_layout(rect=[0, 0.03, 1, 0.95])
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close()
        self._reset_style()
