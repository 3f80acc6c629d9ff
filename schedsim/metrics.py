from __future__ import annotations

from typing import List, Sequence

from .models import Process, ProcessMetrics, ScheduleResult, SystemMetrics


def process_metrics(process: Process, start_time: int, completion_time: int) -> ProcessMetrics:
    """
    Derive response, waiting and turnaround time for one finished process.

    All three are computed from Start/End/burst; response equals waiting
    only for the non-preemptive algorithms and is never assumed to.
    """
    response_time = start_time - process.arrival_time
    turnaround_time = completion_time - process.arrival_time
    waiting_time = turnaround_time - process.burst_time
    return ProcessMetrics(
        pid=process.pid,
        arrival_time=process.arrival_time,
        burst_time=process.burst_time,
        start_time=start_time,
        completion_time=completion_time,
        response_time=response_time,
        waiting_time=waiting_time,
        turnaround_time=turnaround_time,
    )


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline segments.
    """
    if not result.processes:
        system = SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in result.processes)
    cpu_busy_time = sum(seg.duration for seg in result.timeline if not seg.is_idle)
    idle_time = sum(seg.duration for seg in result.timeline if seg.is_idle)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        context_switches=max(0, len(result.dispatch_order) - 1),
    )
    result.system = system
    return system


def summarize_process_metrics(processes: Sequence[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_response": 0.0, "avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(processes)
    return {
        "avg_response": sum(p.response_time for p in processes) / n,
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }


def format_average(value: float, precision: int = 2) -> str:
    return f"{value:.{precision}f}"


def format_summary(processes: List[ProcessMetrics], precision: int = 2) -> dict:
    return {name: format_average(value, precision) for name, value in summarize_process_metrics(processes).items()}
