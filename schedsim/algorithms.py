from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from .errors import InternalInvariantViolation, UnknownAlgorithm
from .metrics import compute_system_metrics, process_metrics
from .models import IDLE, Process, ScheduleResult, Segment
from .ordering import by_arrival
from .ready_set import AdmissionList, burst_selector, remaining_selector
from .timeline import SegmentBuilder
from .validation import validate_quantum, validate_workload

logger = logging.getLogger(__name__)


def _jump_to_next_arrival(algorithm: str, admission: AdmissionList, builder: SegmentBuilder, clock: int) -> int:
    """
    Mark the CPU idle from ``clock`` and return the time the next process arrives.
    """
    nxt = admission.next_arrival
    if nxt is None or nxt <= clock:
        raise InternalInvariantViolation(
            f"{algorithm}: nothing ready at t={clock} and no later arrival, "
            "but processes are still incomplete"
        )
    builder.switch_to(IDLE, clock)
    logger.debug("%s: idle [%d, %d)", algorithm, clock, nxt)
    return nxt


def _build_result(
    algorithm: str,
    quantum: Optional[int],
    processes: Sequence[Process],
    starts: List[Optional[int]],
    ends: List[Optional[int]],
    timeline: List[Segment],
) -> ScheduleResult:
    metrics = []
    for i, p in enumerate(processes):
        if starts[i] is None or ends[i] is None:
            raise InternalInvariantViolation(f"{algorithm}: process {p.pid} never completed")
        metrics.append(process_metrics(p, starts[i], ends[i]))

    result = ScheduleResult(algorithm=algorithm, quantum=quantum, processes=metrics, timeline=timeline)
    compute_system_metrics(result)
    return result


def schedule_fcfs(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    n = len(processes)
    starts: List[Optional[int]] = [None] * n
    ends: List[Optional[int]] = [None] * n
    builder = SegmentBuilder()
    clock = 0

    for i in by_arrival(processes):
        p = processes[i]
        if clock < p.arrival_time:
            builder.switch_to(IDLE, clock)
            clock = p.arrival_time

        builder.switch_to(p.pid, clock)
        starts[i] = clock
        clock += p.burst_time
        ends[i] = clock
        logger.debug("FCFS: pid %s runs [%d, %d)", p.pid, starts[i], clock)

    return _build_result("FCFS", None, processes, starts, ends, builder.close(clock))


def schedule_sjf(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time (tie-breaker:
    earlier arrival, then PID) and run it to completion.
    """
    n = len(processes)
    starts: List[Optional[int]] = [None] * n
    ends: List[Optional[int]] = [None] * n
    builder = SegmentBuilder()
    admission = AdmissionList(processes)
    ready = burst_selector(processes)

    clock = 0
    completed = 0
    while completed < n:
        for i in admission.admit(clock):
            ready.insert(i)

        if ready.is_empty():
            clock = _jump_to_next_arrival("SJF", admission, builder, clock)
            continue

        i = ready.extract_min()
        p = processes[i]
        builder.switch_to(p.pid, clock)
        starts[i] = clock
        clock += p.burst_time
        ends[i] = clock
        completed += 1
        logger.debug("SJF: pid %s runs [%d, %d)", p.pid, starts[i], clock)

    return _build_result("SJF (non-preemptive)", None, processes, starts, ends, builder.close(clock))


def schedule_srtf(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).

    The best-ranked process runs until it finishes or until the next
    arrival, whichever comes first; at an arrival the ranking is redone.
    """
    n = len(processes)
    remaining = [p.burst_time for p in processes]
    starts: List[Optional[int]] = [None] * n
    ends: List[Optional[int]] = [None] * n
    builder = SegmentBuilder()
    admission = AdmissionList(processes)
    ready = remaining_selector(processes, remaining)

    clock = 0
    completed = 0
    while completed < n:
        for i in admission.admit(clock):
            ready.insert(i)

        if ready.is_empty():
            clock = _jump_to_next_arrival("SRTF", admission, builder, clock)
            continue

        i = ready.peek_min()
        p = processes[i]
        if starts[i] is None:
            starts[i] = clock
        builder.switch_to(p.pid, clock)

        finish_time = clock + remaining[i]
        next_arrival = admission.next_arrival
        ready.extract_min()

        if next_arrival is None or finish_time <= next_arrival:
            logger.debug("SRTF: pid %s runs [%d, %d) to completion", p.pid, clock, finish_time)
            remaining[i] = 0
            clock = finish_time
            ends[i] = clock
            completed += 1
        else:
            logger.debug("SRTF: pid %s runs [%d, %d), arrival pending", p.pid, clock, next_arrival)
            remaining[i] -= next_arrival - clock
            clock = next_arrival
            ready.insert(i)

    return _build_result("SRTF (preemptive SJF)", None, processes, starts, ends, builder.close(clock))


def schedule_rr(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice is running join the queue before the
    preempted process is put back at its tail.
    """
    quantum = validate_quantum(quantum)

    n = len(processes)
    remaining = [p.burst_time for p in processes]
    starts: List[Optional[int]] = [None] * n
    ends: List[Optional[int]] = [None] * n
    builder = SegmentBuilder()
    admission = AdmissionList(processes)
    ready: Deque[int] = deque()

    clock = 0
    completed = 0
    ready.extend(admission.admit(clock))

    while completed < n:
        if not ready:
            clock = _jump_to_next_arrival("RR", admission, builder, clock)
            ready.extend(admission.admit(clock))
            continue

        i = ready.popleft()
        p = processes[i]
        if starts[i] is None:
            starts[i] = clock
        builder.switch_to(p.pid, clock)

        run_time = min(quantum, remaining[i])
        logger.debug("RR: pid %s runs [%d, %d)", p.pid, clock, clock + run_time)
        clock += run_time
        remaining[i] -= run_time

        # Arrivals during the slice go first.
        ready.extend(admission.admit(clock))

        if remaining[i] > 0:
            ready.append(i)
        else:
            ends[i] = clock
            completed += 1
        logger.debug("RR: t=%d queue %s", clock, list(ready))

    return _build_result("Round Robin", quantum, processes, starts, ends, builder.close(clock))


ALGORITHMS = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "srtf": schedule_srtf,
    "rr": schedule_rr,
}

ALGORITHM_ORDER = ["fcfs", "sjf", "srtf", "rr"]

PREEMPTIVE = {"srtf", "rr"}


def _resolve(names: Iterable[str]) -> List[str]:
    resolved = []
    for name in names:
        key = name.lower()
        if key not in ALGORITHMS:
            raise UnknownAlgorithm(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHM_ORDER)})")
        resolved.append(key)
    return resolved


def run_algorithm(name: str, processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Validate the workload and dispatch to the requested algorithm.
    Quantum is only used (and required) by round-robin.
    """
    (key,) = _resolve([name])
    validate_workload(processes, quantum if key == "rr" else None, require_quantum=key == "rr")
    return ALGORITHMS[key](processes, quantum=quantum)


def run_all(
    processes: List[Process],
    quantum: Optional[int] = None,
    algorithms: Optional[Iterable[str]] = None,
) -> Dict[str, ScheduleResult]:
    """
    Run several algorithms on the same workload.

    The whole input is validated before the first algorithm starts, so an
    invalid workload produces no results at all.
    """
    keys = _resolve(algorithms if algorithms is not None else ALGORITHM_ORDER)
    needs_quantum = "rr" in keys
    validate_workload(processes, quantum if needs_quantum else None, require_quantum=needs_quantum)

    results: Dict[str, ScheduleResult] = {}
    for key in keys:
        logger.info("Running %s on %d processes", key, len(processes))
        results[key] = ALGORITHMS[key](processes, quantum=quantum)
    return results
