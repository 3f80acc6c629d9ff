from __future__ import annotations

import csv
import json
import logging
import sys
from pathlib import Path
from typing import List, Mapping, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt, Prompt

from .errors import InvalidWorkloadEntry
from .models import Process, Workload

logger = logging.getLogger(__name__)

_ALIASES = {
    "arrival_time": ("arrival_time", "arrival"),
    "burst_time": ("burst_time", "burst"),
}


def load_workload(path: str | Path) -> Workload:
    """
    Load a workload from a JSON, CSV or plain-text file ("-" reads text from stdin).
    """
    if str(path) == "-":
        try:
            return parse_text_workload(sys.stdin.read())
        except UnicodeDecodeError as exc:
            raise InvalidWorkloadEntry(f"stdin is not valid UTF-8 text: {exc}") from exc

    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            workload = _load_json(path)
        elif suffix == ".csv":
            workload = _load_csv(path)
        elif suffix == ".txt":
            workload = parse_text_workload(path.read_text(encoding="utf-8"))
        else:
            raise InvalidWorkloadEntry(f"Unsupported workload format: {suffix} (use .json, .csv or .txt)")
    except UnicodeDecodeError as exc:
        raise InvalidWorkloadEntry(f"{path} is not valid UTF-8 text: {exc}") from exc

    logger.info("Loaded %d processes from %s", len(workload.processes), path)
    return workload


def _load_json(path: Path) -> Workload:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidWorkloadEntry(f"{path} is not valid JSON: {exc}") from exc

    quantum = None
    if isinstance(raw, dict):
        quantum = _optional_int(raw.get("quantum"), "quantum")
        raw = raw.get("processes")

    if not isinstance(raw, list):
        raise InvalidWorkloadEntry("JSON workload must be a list of process objects or an object with 'processes'")

    return Workload(processes=[_process_from_mapping(entry) for entry in raw], quantum=quantum)


def _load_csv(path: Path) -> Workload:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return Workload(processes=processes)


def _field(mapping: Mapping, name: str):
    for alias in _ALIASES.get(name, (name,)):
        if alias in mapping:
            return mapping[alias]
    raise KeyError(name)


def _process_from_mapping(mapping) -> Process:
    try:
        pid = int(mapping["pid"])
        arrival_time = int(_field(mapping, "arrival_time"))
        burst_time = int(_field(mapping, "burst_time"))
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidWorkloadEntry(f"Invalid process entry: {mapping!r}") from exc

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time)


def _optional_int(value, label: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidWorkloadEntry(f"Invalid {label}: {value!r}") from exc


def parse_text_workload(text: str) -> Workload:
    """
    Parse the classic terminal format: the process count, then
    ``pid arrival burst`` for every process, then the time quantum.

    Tokens may be split across lines arbitrarily; the quantum is optional.
    """
    tokens = text.split()
    pos = 0

    def take(label: str) -> int:
        nonlocal pos
        if pos >= len(tokens):
            raise InvalidWorkloadEntry(f"Failed to read {label}: unexpected end of input")
        value = _token_int(tokens[pos], label)
        pos += 1
        return value

    count = take("number of processes")
    processes: List[Process] = []
    for _ in range(max(count, 0)):
        pid = take("PID")
        arrival_time = take("Arrival")
        burst_time = take("Burst")
        processes.append(Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time))

    quantum = take("Quantum") if pos < len(tokens) else None
    if pos < len(tokens):
        logger.warning("Ignoring %d trailing tokens in workload text", len(tokens) - pos)
    return Workload(processes=processes, quantum=quantum)


def _token_int(token: str, label: str) -> int:
    try:
        return int(token)
    except ValueError as exc:
        raise InvalidWorkloadEntry(f"Failed to read {label}: {token!r} is not an integer") from exc


def parse_process_line(line: str) -> Process:
    """
    Parse one ``pid arrival burst`` line.
    """
    tokens = line.split()
    if len(tokens) != 3:
        raise InvalidWorkloadEntry(f"Expected 'PID Arrival Burst', got {line!r}")
    pid, arrival_time, burst_time = (
        _token_int(token, label) for token, label in zip(tokens, ("PID", "Arrival", "Burst"))
    )
    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time)


def prompt_workload(console: Optional[Console] = None, ask_quantum: bool = True) -> Workload:
    """
    Read a workload interactively: the count, one ``PID Arrival Burst``
    line per process, then the quantum. Invalid lines are asked again.
    """
    console = console or Console()
    count = IntPrompt.ask("Number of Processes", console=console)

    processes: List[Process] = []
    if count > 0:
        console.print("Enter details for each process on its own line: PID Arrival Burst")
    while len(processes) < count:
        line = Prompt.ask(f"  Process {len(processes) + 1}", console=console)
        try:
            processes.append(parse_process_line(line))
        except InvalidWorkloadEntry as exc:
            console.print(f"[prompt.invalid]{escape(str(exc))}")

    quantum = IntPrompt.ask("Enter Time Quantum", console=console) if ask_quantum else None
    return Workload(processes=processes, quantum=quantum)
