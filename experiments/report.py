import base64
import json
from datetime import datetime
from pathlib import Path

import yaml

from experiments.artifacts import read_jsonl
from generators.schemas import DEFAULT_BASE_LAMBDA
from generators.time_crystal import SAFETY_MARGIN

KPI_FIELDS = [
    ("decoding_rate", "Decoding Rate"),
    ("accuracy", "Field Accuracy"),
    ("resonance", "Resonance"),
    ("stability_index", "Stability"),
    ("lambda_stability", "λ Stability"),
]


def _pct(value) -> str:
    return f"{value:.6f}%" if isinstance(value, (int, float)) else "N/A"


class ReportGenerator:
    def __init__(self, run_dir: Path, config: dict):
        self.run_dir = Path(run_dir)
        self.plots_dir = self.run_dir / "plots"
        self.config = config
        self.metrics = read_jsonl(self.run_dir / "metrics.jsonl")
        self.points = read_jsonl(self.run_dir / "prime_field.jsonl")
        self.tunnel = read_jsonl(self.run_dir / "tunnel_depth.jsonl")
        self.crystal = read_jsonl(self.run_dir / "time_crystal.jsonl")
        self.primes = self._load_primes()
        self.kpis = self._calculate_kpis()

    def _load_primes(self) -> dict:
        primes_path = self.run_dir / "primes.json"
        if not primes_path.exists():
            return {"primes": [], "summary": {}}
        with open(primes_path, "r") as f:
            return json.load(f)

    def _calculate_kpis(self) -> dict:
        summary = dict(self.primes.get("summary") or {})
        if not summary and self.metrics:
            summary = {k: self.metrics[-1].get(k) for k, _ in KPI_FIELDS}
            summary["total_primes_found"] = self.metrics[-1].get("total_primes_found")

        issues_total = sum(self.metrics[-1].get("issues", {}).values()) if self.metrics else 0
        elapsed = [m["elapsed_ms"] for m in self.metrics if m.get("elapsed_ms") is not None]

        return {
            **summary,
            "ticks": len(self.metrics),
            "numeric_issues": issues_total,
            "avg_elapsed_ms": sum(elapsed) / len(elapsed) if elapsed else None,
        }

    def _lambda_panel(self) -> list[tuple[str, str]]:
        base_lambda = self.config.get("base_lambda", DEFAULT_BASE_LAMBDA)
        last = self.points[-1] if self.points else {}
        return [
            ("Base λ", f"{base_lambda}"),
            ("Phase Coherence", _pct(last.get("phase_coherence", 0) * 100)),
            ("Zeta Alignment", _pct(last.get("zeta_alignment", 0) * 100)),
            ("Tunnel Strength", _pct(last.get("tunnel_effect", 0) * 100)),
        ]

    def _tunnel_rows(self) -> list[tuple[str, str]]:
        if not self.tunnel:
            return []
        deepest = max(self.tunnel, key=lambda p: p["depth"])
        strongest = max(self.tunnel, key=lambda p: p["tunneling_effect"])
        limit_hits = sum(1 for p in self.tunnel if p.get("limit_exceeded"))
        tunnel_issues = self.metrics[-1].get("tunnel_issues", {}) if self.metrics else {}
        return [
            ("Steps", str(len(self.tunnel))),
            ("Max Depth", f"{deepest['depth']:.2e} (step {deepest['step']})"),
            ("Min λ", f"{deepest['lambda_value']:.2e}"),
            ("Peak Tunneling Effect", f"{strongest['tunneling_effect']:.2f} (step {strongest['step']})"),
            ("Float64 Limit Warnings", str(limit_hits)),
            ("Numeric Issues", str(sum(tunnel_issues.values()))),
        ]

    def _crystal_rows(self) -> list[tuple[str, str]]:
        if not self.crystal:
            return []
        latest = self.crystal[-1]
        status = latest.get("status", {})
        critical = sum(1 for s in self.crystal if s.get("status", {}).get("critical_event"))
        return [
            ("Samples", str(len(self.crystal))),
            ("Status", status.get("status_message", "N/A")),
            ("Stability Index", f"{latest['stability_index'] * 100:.4f}%"),
            ("Purity Level", f"{latest['purity_level'] * 100:.4f}%"),
            ("Error Rate", f"{latest['error_rate']:.4e}"),
            ("Safety Margin", f"{SAFETY_MARGIN:.0e}"),
            ("Critical Events", str(critical)),
        ]

    def generate_markdown(self, output_path: Path) -> None:
        output_path = Path(output_path)

        run_id = self.config.get("run_id", "N/A")
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        max_range = self.config.get("max_range", "N/A")

        kpi_rows = "\n".join(
            f"| {label} | {_pct(self.kpis.get(key))} |" for key, label in KPI_FIELDS
        )
        lambda_rows = "\n".join(f"| {k} | {v} |" for k, v in self._lambda_panel())
        tunnel_rows = "\n".join(f"| {k} | {v} |" for k, v in self._tunnel_rows())
        crystal_rows = "\n".join(f"| {k} | {v} |" for k, v in self._crystal_rows())
        primes = ", ".join(str(p) for p in self.primes.get("primes", []))
        avg_elapsed = self.kpis.get("avg_elapsed_ms")
        avg_elapsed_str = f"{avg_elapsed:.2f} ms" if avg_elapsed is not None else "N/A"

        md_content = f"""# Lambda Field Report

## Run Summary
- **Run ID:** {run_id}
- **Date:** {date}
- **Range:** 1..{max_range}
- **Ticks:** {self.kpis.get('ticks', 0)}
- **Avg Generation Time:** {avg_elapsed_str}
- **Numeric Issues (last tick):** {self.kpis.get('numeric_issues', 0)}

## Key Metrics
| Metric | Value |
|--------|-------|
{kpi_rows}
| Total Primes Found | {self.kpis.get('total_primes_found', 'N/A')} |

## λ Stabilization Metrics
| Metric | Value |
|--------|-------|
{lambda_rows}

## Decoded Primes
{primes or "None"}

## Tunnel Depth
| Metric | Value |
|--------|-------|
{tunnel_rows}

## Time Crystal
| Metric | Value |
|--------|-------|
{crystal_rows}

## Configuration
```yaml
{yaml.dump(self.config, default_flow_style=False)}
```
"""
        output_path.write_text(md_content, encoding="utf-8")

    def generate_html(self, output_path: Path) -> None:
        output_path = Path(output_path)

        # Embed images as base64
        embedded_images = []
        if self.plots_dir.exists():
            plot_files = sorted(list(self.plots_dir.glob("*.png")))
            for plot_file in plot_files:
                with open(plot_file, "rb") as f:
                    encoded = base64.b64encode(f.read()).decode("utf-8")
                    title = plot_file.stem.replace("_", " ").title()
                    embedded_images.append(f'<div class="plot-card"><h3>{title}</h3><img src="data:image/png;base64,{encoded}" alt="{plot_file.name}"></div>')

        run_id = self.config.get("run_id", "N/A")
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        max_range = self.config.get("max_range", "N/A")

        kpi_cards = "".join(
            f'<div class="kpi-card"><div class="kpi-label">{label}</div>'
            f'<div class="kpi-value">{_pct(self.kpis.get(key))}</div></div>'
            for key, label in KPI_FIELDS
        )

        def table(rows: list[tuple[str, str]]) -> str:
            if not rows:
                return "<p>No data.</p>"
            body = "".join(f"<tr><td>{k}</td><td>{v}</td></tr>" for k, v in rows)
            return f"<table><tbody>{body}</tbody></table>"

        summary_table = table([
            ("Run ID", str(run_id)),
            ("Range", f"1..{max_range}"),
            ("Ticks", str(self.kpis.get("ticks", 0))),
            ("Total Primes Found", str(self.kpis.get("total_primes_found", "N/A"))),
            ("Numeric Issues (last tick)", str(self.kpis.get("numeric_issues", 0))),
        ])

        prime_chips = "".join(
            f'<span class="prime">{p}</span>' for p in self.primes.get("primes", [])
        )

        html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Lambda Field Report - {run_id}</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 1000px; margin: 0 auto; padding: 20px; background-color: #f4f7f6; }}
        h1, h2, h3 {{ color: #2c3e50; }}
        section {{ background: white; padding: 25px; margin-bottom: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); }}
        table {{ border-collapse: collapse; width: 100%; margin-bottom: 20px; }}
        td {{ border: 1px solid #eee; padding: 12px; text-align: left; }}
        tr:nth-child(even) {{ background-color: #fafafa; }}
        .config {{ background-color: #2c3e50; color: #ecf0f1; padding: 20px; border-radius: 5px; overflow-x: auto; font-family: 'Courier New', Courier, monospace; font-size: 14px; }}
        .plot-card {{ margin-bottom: 30px; text-align: center; }}
        img {{ max-width: 100%; height: auto; border: 1px solid #ddd; border-radius: 5px; }}
        .kpi-container {{ display: flex; flex-wrap: wrap; gap: 20px; }}
        .kpi-card {{ flex: 1; min-width: 160px; background: #fff; border-top: 4px solid #8B5CF6; border-radius: 8px; padding: 20px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); text-align: center; }}
        .kpi-value {{ font-size: 22px; font-weight: bold; color: #2c3e50; margin-top: 10px; }}
        .kpi-label {{ font-size: 12px; color: #7f8c8d; text-transform: uppercase; letter-spacing: 1px; }}
        .prime {{ display: inline-block; margin: 0 6px 6px 0; padding: 2px 8px; background: #ede9fe; border-radius: 4px; font-family: monospace; }}
    </style>
</head>
<body>
    <header style="margin-bottom: 40px; text-align: center;">
        <h1>Lambda Field Report</h1>
        <p style="color: #7f8c8d;">Generated on {date}</p>
    </header>

    <section>
        <h2>Run Summary</h2>
        {summary_table}
    </section>

    <section style="background: transparent; box-shadow: none; padding: 0;">
        <div class="kpi-container">{kpi_cards}</div>
    </section>

    <section>
        <h2>λ Stabilization Metrics</h2>
        {table(self._lambda_panel())}
    </section>

    <section>
        <h2>Decoded Primes</h2>
        <div>{prime_chips or "<p>None</p>"}</div>
    </section>

    <section>
        <h2>Tunnel Depth</h2>
        {table(self._tunnel_rows())}
    </section>

    <section>
        <h2>Time Crystal</h2>
        {table(self._crystal_rows())}
    </section>

    <section>
        <h2>Visualizations</h2>
        {"".join(embedded_images) if embedded_images else "<p>No plots available.</p>"}
    </section>

    <section>
        <h2>Configuration</h2>
        <pre class="config">{yaml.dump(self.config, default_flow_style=False)}</pre>
    </section>
</body>
</html>
"""
        output_path.write_text(html_content, encoding="utf-8")
