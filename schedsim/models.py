from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

# Owner of segments during which no process is runnable.
IDLE = None


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int


@dataclass
class Segment:
    """
    One maximal contiguous interval of the timeline with a single owner
    (a process pid, or IDLE).
    """

    owner: Optional[int]
    start_time: int
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.owner is IDLE

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    response_time: int
    waiting_time: int
    turnaround_time: int


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    context_switches: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[Segment] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def dispatch_order(self) -> List[int]:
        """Pids in the order they took the CPU (one entry per context switch in)."""
        return [seg.owner for seg in self.timeline if not seg.is_idle]

    @property
    def completion_order(self) -> List[int]:
        ordered = sorted(self.processes, key=lambda m: (m.completion_time, m.pid))
        return [m.pid for m in ordered]

    def metrics_for(self, pid: int) -> ProcessMetrics:
        for m in self.processes:
            if m.pid == pid:
                return m
        raise KeyError(pid)


@dataclass
class Workload:
    processes: List[Process] = field(default_factory=list)
    quantum: Optional[int] = None
