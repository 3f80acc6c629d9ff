"""
Tie-break rules shared by every scheduling algorithm.

Both orders are expressed as key functions so callers hand them to
``sorted`` / ``heapq`` explicitly instead of relying on a shared comparator.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import Process


def arrival_key(process: Process) -> Tuple[int, int]:
    """Earlier arrival first, then lower pid."""
    return (process.arrival_time, process.pid)


def rank_key(rank: int, process: Process) -> Tuple[int, int, int]:
    """Smaller rank (burst or remaining time) first, then arrival, then pid."""
    return (rank, process.arrival_time, process.pid)


def by_arrival(processes: Sequence[Process]) -> List[int]:
    """Return table indices sorted by arrival order."""
    return sorted(range(len(processes)), key=lambda i: arrival_key(processes[i]))
