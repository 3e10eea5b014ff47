"""
Experiments Module

Run configuration, scheduling and CLI for the lambda field generators.

This module provides:
- YAML-based configuration loading
- Periodic and single-shot scheduling with cancellation
- Numeric auditing of generated sequences
- Artifact storage, plots and reports
- One-click run execution
"""

import logging

__version__ = "0.1.0"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route module loggers to stderr at ``level``."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
