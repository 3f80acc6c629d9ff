from __future__ import annotations

import argparse
import logging
import time
from typing import Dict, Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHM_ORDER, PREEMPTIVE, run_algorithm, run_all
from .config import DEFAULT_SIMULATION_CONFIG, SimulationConfig, configure_logging, resolve_quantum
from .errors import InternalInvariantViolation, SchedulerError
from .export import write_results_csv
from .gantt import build_rich_gantt, iter_ticks
from .metrics import format_summary
from .models import ScheduleResult, Workload
from .timeline import check_timeline
from .workload_io import load_workload, prompt_workload

logger = logging.getLogger(__name__)


def build_parser(config: SimulationConfig = DEFAULT_SIMULATION_CONFIG) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, RR).",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help=f"Logging verbosity (default: {config.log_level}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shorthand for --log-level DEBUG (logs every scheduling decision).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify every timeline is contiguous and coalesced; exit with status 2 otherwise.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHM_ORDER)}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a JSON, CSV or text workload file ('-' reads text from stdin).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help=f"Time quantum for round-robin (default: from the workload, else {config.quantum}).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a tick-by-tick trace of the schedule in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=config.step_delay,
        help=f"Seconds to wait between steps when --step is used (default: {config.step_delay}).",
    )
    run_parser.add_argument("--csv", default=None, help="Write per-process results to this CSV file.")

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a JSON, CSV or text workload file ('-' reads text from stdin).",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(config.algorithms),
        help=f"Algorithms to compare (default: {' '.join(config.algorithms)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help=f"Time quantum used for RR (default: from the workload, else {config.quantum}).",
    )
    compare_parser.add_argument(
        "--gantt",
        action="store_true",
        help="Print the full report (Gantt chart and per-process table) for every algorithm.",
    )
    compare_parser.add_argument("--csv", default=None, help="Write per-process results to this CSV file.")

    prompt_parser = subparsers.add_parser(
        "prompt",
        help="Enter processes interactively, then run every algorithm on them.",
    )
    prompt_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Use this quantum instead of asking for one.",
    )
    prompt_parser.add_argument("--csv", default=None, help="Write per-process results to this CSV file.")

    return parser


def _print_result(result: ScheduleResult, console: Console, precision: int = 2) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print(f"[bold]Context switches:[/bold] {' '.join(str(pid) for pid in result.dispatch_order)}")
    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Response",
        "Wait",
        "Turnaround",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "PID" else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.response_time),
            str(p.waiting_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    summary = format_summary(result.processes, precision)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg response", summary["avg_response"])
    sys_table.add_row("Avg waiting", summary["avg_waiting"])
    sys_table.add_row("Avg turnaround", summary["avg_turnaround"])
    if result.system:
        sys = result.system
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Context switches", str(sys.context_switches))

    console.print(sys_table)


def _print_comparison(
    results: Dict[str, ScheduleResult], console: Console, title: str, precision: int = 2
) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Preemptive", justify="center")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")

    for key, result in results.items():
        summary = format_summary(result.processes, precision)
        summary_table.add_row(
            result.algorithm,
            "yes" if key in PREEMPTIVE else "no",
            "" if result.quantum is None else str(result.quantum),
            summary["avg_response"],
            summary["avg_waiting"],
            summary["avg_turnaround"],
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Tick-by-tick textual trace of the computed schedule.
    """
    if not result.timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = result.timeline[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    ran: Dict[int, int] = {}
    for t, owner in iter_ticks(result.timeline):
        if owner is None:
            console.print(f"t={t:2d}: [dim]idle[/dim]")
        else:
            ran[owner] = ran.get(owner, 0) + 1
            console.print(f"t={t:2d}: P{owner} [green]{'█' * ran[owner]}[/green]")
        time.sleep(delay)


def _check_results(results: Iterable[ScheduleResult]) -> None:
    for result in results:
        problems = check_timeline(result.timeline)
        if problems:
            raise InternalInvariantViolation(f"{result.algorithm}: " + "; ".join(problems))


def _run_workload(
    workload: Workload,
    algorithms: List[str],
    quantum: Optional[int],
    console: Console,
    full_report: bool,
    csv_path: Optional[str],
    check: bool,
    config: SimulationConfig,
) -> None:
    quantum = resolve_quantum(quantum, workload.quantum, config)
    results = run_all(workload.processes, quantum=quantum, algorithms=algorithms)
    if check:
        _check_results(results.values())

    if full_report:
        for result in results.values():
            _print_result(result, console, config.precision)
            console.print()

    _print_comparison(results, console, "Algorithm comparison", config.precision)

    if csv_path:
        write_results_csv(results.values(), csv_path)
        console.print(f"[dim]Wrote per-process results to {csv_path}[/dim]")


def main(argv: list[str] | None = None, config: SimulationConfig = DEFAULT_SIMULATION_CONFIG) -> int:
    parser = build_parser(config)
    args = parser.parse_args(argv)

    console = Console()
    configure_logging("DEBUG" if args.verbose else args.log_level)

    try:
        if args.command == "run":
            workload = load_workload(args.workload)
            quantum = resolve_quantum(args.quantum, workload.quantum, config) if args.algorithm.lower() == "rr" else None
            result = run_algorithm(args.algorithm, workload.processes, quantum=quantum)
            if args.check:
                _check_results([result])
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, config.precision)
            if args.csv:
                write_results_csv([result], args.csv)
            return 0

        if args.command == "compare":
            workload = load_workload(args.workload)
            _run_workload(workload, args.algorithms, args.quantum, console, args.gantt, args.csv, args.check, config)
            return 0

        if args.command == "prompt":
            workload = prompt_workload(console, ask_quantum=args.quantum is None)
            _run_workload(
                workload, list(config.algorithms), args.quantum, console, True, args.csv, args.check, config
            )
            return 0
    except InternalInvariantViolation:
        logger.critical("Internal scheduler error", exc_info=True)
        return 2
    except (SchedulerError, OSError) as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1
    except EOFError:
        console.print("[red]Error: input ended before the workload was complete[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("[red]Error: interrupted[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
