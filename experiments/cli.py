"""CLI interface for running lambda field generators."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml

from experiments import configure_logging
from experiments.compare import RunComparator
from experiments.config import load_config
from experiments.report import ReportGenerator
from experiments.runner import ExperimentRunner
from experiments.summary import RunsSummarizer

app = typer.Typer(help="Lambda Field Generator CLI")


@app.command()
def run(
    config_path: str = typer.Argument(..., help="Path to run YAML config"),
    ticks: Optional[int] = typer.Option(
        None,
        "--ticks",
        min=1,
        help="Override max_prime_ticks from the config",
    ),
    forever: bool = typer.Option(
        False,
        "--forever",
        help="Regenerate the prime field until interrupted",
    ),
) -> None:
    """Run the generators from a config file."""
    if ticks is not None and forever:
        typer.secho("❌ --ticks and --forever are mutually exclusive", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        config = load_config(config_path)
        if ticks is not None:
            config.max_prime_ticks = ticks
        elif forever:
            config.max_prime_ticks = None

        configure_logging(config.log_level)
        runner = ExperimentRunner(config)
        summary = runner.run()

        if summary.get("status") == "completed":
            typer.secho("\n✅ Run completed successfully!", fg=typer.colors.GREEN)
        else:
            typer.secho("\n⚠️  Run incomplete", fg=typer.colors.YELLOW)

    except FileNotFoundError as e:
        typer.secho(f"❌ Config file not found: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.secho(f"❌ Invalid config: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.secho(f"❌ Run failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def report(
    run_id: str = typer.Argument(..., help="Run ID to generate report for"),
    artifact_dir: str = typer.Option("artifacts", help="Artifacts directory"),
) -> None:
    """Generate Markdown and HTML reports for a run."""
    run_dir = Path(artifact_dir) / run_id

    if not run_dir.exists():
        typer.secho(f"❌ Run not found: {run_id}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    config_path = run_dir / "config.yaml"

    if not (run_dir / "prime_field.jsonl").exists():
        typer.secho(f"❌ Prime field not found for run: {run_id}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if not config_path.exists():
        typer.secho(f"❌ Config not found for run: {run_id}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    generator = ReportGenerator(run_dir, config)

    md_path = run_dir / "report.md"
    html_path = run_dir / "report.html"

    generator.generate_markdown(md_path)
    generator.generate_html(html_path)

    typer.secho("✅ Reports generated successfully!", fg=typer.colors.GREEN)
    typer.echo(f"   Markdown: {md_path}")
    typer.echo(f"   HTML:     {html_path}")


@app.command()
def list_runs(
    artifact_dir: str = typer.Option("artifacts", help="Artifacts directory"),
) -> None:
    """List all runs in artifacts directory."""
    artifacts_path = Path(artifact_dir)

    if not artifacts_path.exists():
        typer.secho(f"❌ Artifacts directory not found: {artifact_dir}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    run_dirs = [d for d in artifacts_path.iterdir() if d.is_dir()]

    if not run_dirs:
        typer.secho("No runs found.", fg=typer.colors.YELLOW)
        return

    typer.secho(f"\n📁 Found {len(run_dirs)} run(s):\n", fg=typer.colors.BLUE)

    for run_dir in sorted(run_dirs):
        metrics_path = run_dir / "metrics.jsonl"

        has_config = "✓" if (run_dir / "config.yaml").exists() else "✗"
        has_field = "✓" if (run_dir / "prime_field.jsonl").exists() else "✗"
        has_tunnel = "✓" if (run_dir / "tunnel_depth.jsonl").exists() else "✗"

        num_ticks = 0
        if metrics_path.exists():
            with open(metrics_path, "r") as f:
                num_ticks = sum(1 for line in f if line.strip())

        typer.echo(f"  {run_dir.name}")
        typer.echo(
            f"    Config: {has_config} | Prime field: {has_field} | "
            f"Tunnel: {has_tunnel} | Ticks: {num_ticks}"
        )


@app.command()
def summarize(
    artifact_dir: str = typer.Option("artifacts", help="Artifacts directory"),
    output_dir: str = typer.Option(".", help="Output directory for summary files"),
) -> None:
    """Summarize all runs into CSV and JSON tables."""
    artifacts_path = Path(artifact_dir)

    if not artifacts_path.exists():
        typer.secho(f"❌ Artifacts directory not found: {artifact_dir}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    summarizer = RunsSummarizer(artifacts_path)
    runs = summarizer.scan_runs()

    if not runs:
        typer.secho("No runs with metrics found.", fg=typer.colors.YELLOW)
        return

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    csv_path = output_path / "runs_summary.csv"
    json_path = output_path / "runs_summary.json"

    summarizer.export_csv(csv_path)
    summarizer.export_json(json_path)

    typer.secho(f"✅ Summarized {len(runs)} run(s)", fg=typer.colors.GREEN)
    typer.echo(f"   CSV:  {csv_path}")
    typer.echo(f"   JSON: {json_path}")


@app.command()
def compare(
    run_ids: list[str] = typer.Argument(..., help="Run IDs to compare"),
    artifact_dir: str = typer.Option("artifacts", help="Artifacts directory"),
    output_dir: str = typer.Option(".", help="Output directory for comparison files"),
) -> None:
    """Compare multiple runs."""
    artifacts_path = Path(artifact_dir)

    if not artifacts_path.exists():
        typer.secho(f"❌ Artifacts directory not found: {artifact_dir}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if len(run_ids) < 2:
        typer.secho("❌ At least 2 run IDs are required for comparison", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    typer.secho(f"\n📊 Comparing {len(run_ids)} runs...\n", fg=typer.colors.BLUE)

    comparator = RunComparator(artifacts_path)
    comparison = comparator.compare(run_ids)

    if not comparison.get("runs"):
        typer.secho("❌ No valid runs found to compare", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    md_path = output_path / "compare.md"
    csv_path = output_path / "compare.csv"

    comparator.export_markdown(comparison, md_path)
    comparator.export_csv(comparison, csv_path)

    typer.secho("✅ Comparison completed successfully!", fg=typer.colors.GREEN)
    typer.echo(f"   Markdown: {md_path}")
    typer.echo(f"   CSV:      {csv_path}")

    warnings = comparison.get("warnings", [])
    if warnings:
        typer.secho("\n⚠️  Warnings:", fg=typer.colors.YELLOW)
        for warning in warnings:
            typer.echo(f"   - {warning}")

    typer.secho("\n📈 Summary:", fg=typer.colors.BLUE)
    stability_winner = comparison.get("stability_winner")
    for run in comparison["runs"]:
        winner_marker = " 🏆" if run["run_id"] == stability_winner else ""
        typer.echo(
            f"   {run['run_id']}{winner_marker}: "
            f"Decoding={run['decoding_rate']:.2f}%, "
            f"Stability={run['stability_index']:.6f}%, "
            f"Primes={run['total_primes_found']}"
        )


if __name__ == "__main__":
    app()
