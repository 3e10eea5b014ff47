"""Experiment runner orchestrating generators, schedulers and artifacts."""

from __future__ import annotations

import logging
import random
import signal
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from tqdm import tqdm

from generators.prime_field import PrimeFieldGenerator
from generators.time_crystal import TimeCrystalMonitor
from generators.tunnel_depth import TunnelDepthGenerator

from experiments.artifacts import ArtifactManager
from experiments.config import ExperimentConfig
from experiments.metrics import MetricsCollector, TickMetrics
from experiments.numeric_audit import NumericAuditor
from experiments.scheduler import CancellationToken, PeriodicTask, single_shot

logger = logging.getLogger(__name__)


class ExperimentRunner:
    """Coordinates all components for a complete run."""

    def __init__(self, config: ExperimentConfig, clock: Callable[[], float] | None = None):
        self.config = config
        self.clock = clock or time.time
        self.artifacts: ArtifactManager | None = None
        self.token = CancellationToken()
        self.collector = MetricsCollector()
        self._previous_handlers: dict[int, Any] = {}
        self.tunnel_issues: dict[str, int] = {}
        self._crystal_monitor: TimeCrystalMonitor | None = None
        self._crystal_critical_events = 0
        self._crystal_errors: list[BaseException] = []

    @property
    def interrupted(self) -> bool:
        return self.token.cancelled

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown on Ctrl+C."""
        def signal_handler(signum: int, frame: Any) -> None:
            print("\n⚠️  Interrupt received. Finishing current tick and shutting down gracefully...")
            self.token.cancel()

        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, signal_handler)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def run(self) -> dict[str, Any]:
        """Run the complete experiment.

        Returns:
            Summary dictionary with run statistics
        """
        self._setup_signal_handlers()
        try:
            self.artifacts = ArtifactManager(self.config)
            self.artifacts.snapshot_config()
            self.artifacts.reset_metrics()

            print(f"🚀 Starting run: {self.config.run_id}")
            print(f"   Range: 1..{self.config.max_range}")
            print(f"   Reference zeros: {len(self.config.reference_zeros)}")
            print(f"   Base λ: {self.config.base_lambda}")
            ticks = self.config.max_prime_ticks if self.config.max_prime_ticks is not None else "∞"
            print(f"   Prime field ticks: {ticks} (every {self.config.prime_interval_s}s)")
            print()

            self._run_tunnel_depth()

            # 时间晶体有自己的定时器, 与素数场并行运行
            crystal_thread = self._start_time_crystal() if self.config.crystal_samples > 0 else None
            try:
                self._run_prime_field()
            except BaseException:
                self.token.cancel()
                raise
            finally:
                if crystal_thread is not None:
                    crystal_thread.join()
            if crystal_thread is not None:
                self._finish_time_crystal()

            return self._finalize_run()

        except Exception as e:
            print(f"\n❌ Run failed: {e}")
            raise
        finally:
            self._restore_signal_handlers()

    def _run_tunnel_depth(self) -> None:
        """Single-shot tunnel depth generation."""
        generator = TunnelDepthGenerator(
            steps=self.config.tunnel_steps,
            rng=random.Random(self.config.seed),
        )
        auditor = NumericAuditor(base_lambda=self.config.base_lambda)

        def tick(_: int) -> None:
            points = generator.generate()
            issues = auditor.audit_tunnel(points)
            self.tunnel_issues = auditor.get_issue_stats()
            if issues:
                logger.warning("Tunnel depth produced %d numeric issue(s): %s", issues, auditor.examples[:3])
            self.artifacts.save_tunnel_depth(points)
            max_depth = max(p.depth for p in points)
            print(f"   🕳️  Tunnel depth: {len(points)} steps, max depth {max_depth:.4f}")

        single_shot(tick, self.token)

    def _run_prime_field(self) -> None:
        """Periodic prime field regeneration with a progress bar."""
        generator = PrimeFieldGenerator(
            max_range=self.config.max_range,
            reference_zeros=self.config.reference_zeros,
            base_lambda=self.config.base_lambda,
        )
        auditor = NumericAuditor(base_lambda=self.config.base_lambda)

        pbar = tqdm(
            total=self.config.max_prime_ticks,
            desc="🔢 Prime field",
            unit="tick",
            ncols=100,
        )

        def tick(index: int) -> None:
            # 每次触发都从头重新计算整条序列, 不复用上一轮的状态
            auditor.reset()
            started = time.perf_counter()
            result = generator.generate()
            elapsed_ms = (time.perf_counter() - started) * 1000
            auditor.audit_prime_field(result.points)

            self.artifacts.save_prime_field(result)

            metrics = TickMetrics.from_summary(
                tick=index,
                summary=result.summary,
                issues=auditor.get_issue_stats(),
                tunnel_issues=self.tunnel_issues,
                elapsed_ms=elapsed_ms,
                timestamp=datetime.now(timezone.utc),
            )
            self.collector.record_tick(metrics)
            self.artifacts.save_tick_metrics(metrics.to_dict())

            summary = result.summary
            pbar.set_postfix({
                "Primes": summary.total_primes_found,
                "Stability": f"{summary.stability_index:.4f}%",
                "λ": f"{summary.lambda_stability:.6f}%",
            })
            pbar.update(1)

            if auditor.total:
                tqdm.write(f"  ⚠️  Tick {index}: {auditor.total} numeric issue(s) {auditor.get_top_issues(3)}")

        task = PeriodicTask(
            interval_s=self.config.prime_interval_s,
            callback=tick,
            token=self.token,
            max_ticks=self.config.max_prime_ticks,
        )
        try:
            completed = task.run()
        finally:
            pbar.close()

        if self.interrupted:
            print(f"\n⚠️  Stopped after {completed} tick(s)")
        else:
            print(f"\n   Completed {completed} prime field tick(s)")

        self.collector.export_csv(self.artifacts.metrics_csv_path)

    def _start_time_crystal(self) -> threading.Thread:
        """Sample the time crystal on a background timer while the prime field runs."""
        monitor = TimeCrystalMonitor(clock=self.clock)
        self._crystal_monitor = monitor
        self._crystal_critical_events = 0
        self._crystal_errors = []

        def tick(_: int) -> None:
            sample = monitor.record()
            if sample.status.critical_event:
                self._crystal_critical_events += 1

        task = PeriodicTask(
            interval_s=self.config.crystal_interval_s,
            callback=tick,
            token=self.token,
            max_ticks=self.config.crystal_samples,
        )

        def worker() -> None:
            try:
                task.run()
            except Exception as e:
                self._crystal_errors.append(e)
                self.token.cancel()

        thread = threading.Thread(target=worker, name="time-crystal", daemon=True)
        thread.start()
        return thread

    def _finish_time_crystal(self) -> None:
        if self._crystal_errors:
            raise self._crystal_errors[0]

        monitor = self._crystal_monitor
        samples = monitor.snapshot()
        self.artifacts.save_time_crystal(samples)

        if len(samples) < min(self.config.crystal_samples, monitor.history.maxlen):
            logger.info(
                "Time crystal stopped early: %d of %d sample(s)",
                len(samples), self.config.crystal_samples,
            )

        latest = monitor.latest
        if latest is not None:
            print(
                f"   ⏱️  Time crystal: {len(samples)} samples kept, "
                f"status {latest.status.status_message}, "
                f"critical events {self._crystal_critical_events}"
            )

    def _finalize_run(self) -> dict[str, Any]:
        """Finalize run: plots, report and summary."""
        if self.config.generate_plots:
            self._generate_plots()

        if self.config.generate_report:
            self._generate_report()

        summary = self.artifacts.get_summary()

        print(f"\n📊 Run Summary:")
        print(f"   Run ID: {summary['run_id']}")
        print(f"   Status: {summary['status']}")
        print(f"   Ticks: {summary['ticks_completed']}")
        if summary.get("decoding_rate") is not None:
            print(f"   Decoding Rate: {summary['decoding_rate']:.6f}%")
            print(f"   Stability Index: {summary['stability_index']:.6f}%")
        print(f"   Artifacts: {self.artifacts.run_dir}")

        return summary

    def _generate_plots(self) -> None:
        """Generate visualization plots from exported sequences."""
        if not self.artifacts:
            return

        try:
            from experiments.plotting import PlotGenerator, MATPLOTLIB_AVAILABLE

            if not MATPLOTLIB_AVAILABLE:
                logger.warning("matplotlib not available, skipping plots")
                return

            plotter = PlotGenerator()
            plots_dir = self.artifacts.plots_dir
            points = self.artifacts.load_prime_field()
            tunnel = self.artifacts.load_tunnel_depth()
            crystal = self.artifacts.load_time_crystal()

            if points:
                plotter.plot_prime_field(points, plots_dir / "prime_field.png")
                plotter.plot_stability_metrics(points, plots_dir / "stability_metrics.png")
            if tunnel:
                plotter.plot_tunnel_depth(tunnel, plots_dir / "tunnel_depth.png")
            if crystal:
                plotter.plot_time_crystal(crystal, plots_dir / "time_crystal.png")

            plotter.plot_dashboard(
                self.artifacts.load_metrics(), points, tunnel, plots_dir / "dashboard.png"
            )

            print(f"\n📈 Plots generated in: {plots_dir}")

        except Exception as e:
            logger.warning(f"Failed to generate plots: {e}")

    def _generate_report(self) -> None:
        """Generate Markdown and HTML reports."""
        if not self.artifacts:
            return

        try:
            from experiments.report import ReportGenerator

            generator = ReportGenerator(
                run_dir=self.artifacts.run_dir,
                config=self.config.to_dict(),
            )

            generator.generate_markdown(self.artifacts.run_dir / "report.md")
            generator.generate_html(self.artifacts.run_dir / "report.html")

            print(f"📄 Reports generated in: {self.artifacts.run_dir}")

        except Exception as e:
            logger.warning(f"Failed to generate reports: {e}")
