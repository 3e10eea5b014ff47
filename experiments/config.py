"""Experiment configuration with YAML support."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import Field

from generators.schemas import RunConfig


class ExperimentConfig(RunConfig):
    """Extended configuration for full runs with scheduling and artifact management."""

    # Artifact management
    artifact_dir: str = "artifacts"

    # Prime field regenerates on a fixed interval; None runs until cancelled
    prime_interval_s: float = Field(default=5.0, ge=0.0)
    max_prime_ticks: int | None = Field(default=1, ge=1)

    # Time crystal monitor (0 samples disables it)
    crystal_interval_s: float = Field(default=0.05, ge=0.0)
    crystal_samples: int = Field(default=0, ge=0)

    generate_plots: bool = True
    generate_report: bool = True
    log_level: str = "INFO"


def load_config(yaml_path: str | Path) -> ExperimentConfig:
    """Load experiment configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        ExperimentConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or missing required fields
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

    try:
        return ExperimentConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: ExperimentConfig, yaml_path: str | Path) -> None:
    """Save experiment configuration to YAML file for reproducibility.

    Args:
        config: ExperimentConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
