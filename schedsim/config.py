"""
Defaults shared by the CLI and the library entry points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler


@dataclass
class SimulationConfig:
    quantum: int = 2
    algorithms: List[str] = field(default_factory=lambda: ["fcfs", "sjf", "srtf", "rr"])
    precision: int = 2
    log_level: str = "WARNING"
    step_delay: float = 0.3


DEFAULT_SIMULATION_CONFIG = SimulationConfig()


def resolve_quantum(
    cli_value: Optional[int],
    workload_value: Optional[int],
    config: SimulationConfig = DEFAULT_SIMULATION_CONFIG,
) -> int:
    """
    Pick the Round Robin quantum: command line first, then the workload
    file, then the configured default.
    """
    if cli_value is not None:
        return cli_value
    if workload_value is not None:
        return workload_value
    return config.quantum


def configure_logging(level: str = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """
    Route the package's log records through rich. Safe to call more than once.
    """
    package_logger = logging.getLogger("schedsim")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    return package_logger
