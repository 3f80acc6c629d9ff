from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from .errors import InvalidArrival, InvalidBurst, InvalidProcessCount, InvalidQuantum
from .models import Process

logger = logging.getLogger(__name__)


def validate_quantum(quantum: Optional[int]) -> int:
    if quantum is None:
        raise InvalidQuantum("Round Robin requires a time quantum (use --quantum)")
    if quantum <= 0:
        raise InvalidQuantum(f"Quantum must be > 0 (got {quantum})")
    return quantum


def validate_workload(
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    require_quantum: bool = False,
) -> None:
    """
    Reject input no algorithm can simulate. Raises the first violation found.

    The quantum is only checked when ``require_quantum`` is set or a value
    was supplied.
    """
    if len(processes) <= 0:
        raise InvalidProcessCount("Number of processes must be positive")

    for p in processes:
        if p.arrival_time < 0:
            raise InvalidArrival(f"Process {p.pid}: arrival must be >= 0 (got {p.arrival_time})")
        if p.burst_time <= 0:
            raise InvalidBurst(f"Process {p.pid}: burst must be > 0 (got {p.burst_time})")

    if require_quantum or quantum is not None:
        validate_quantum(quantum)

    duplicates = sorted(pid for pid, count in Counter(p.pid for p in processes).items() if count > 1)
    if duplicates:
        logger.warning("Duplicate pids in workload: %s; timeline owners will be ambiguous", duplicates)
