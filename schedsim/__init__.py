"""
schedsim package.

Simulates FCFS, SJF, SRTF and Round Robin CPU scheduling over a known set of
processes and reports the Gantt timeline and per-process timing metrics.
"""

from .algorithms import ALGORITHMS, run_algorithm, run_all
from .models import IDLE, Process, ScheduleResult, Segment, Workload

__all__ = [
    "ALGORITHMS",
    "IDLE",
    "Process",
    "ScheduleResult",
    "Segment",
    "Workload",
    "run_algorithm",
    "run_all",
]
