from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Segment


def _label(owner: Optional[int], width: int) -> str:
    text = "idle" if owner is None else f"P{owner}"
    return text[:width].ljust(width)


def render_gantt(segments: List[Segment]) -> str:
    """
    Plain-text Gantt chart; idle time is drawn with dots.
    """
    if not segments:
        return "(no execution)"

    line = "|"
    labels = " "
    time_marks = f"{segments[0].start_time}"

    for seg in segments:
        width = max(1, seg.duration)
        line += ("." if seg.is_idle else "=") * width
        labels += _label(seg.owner, width)
        time_marks += f"{seg.end_time:>{max(width, len(str(seg.end_time)) + 1)}}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(segments: List[Segment]) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not segments:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = f"{segments[0].start_time}"

    for seg in segments:
        width = max(1, seg.duration)
        if seg.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(_label(None, width), style="dim")
        else:
            timeline.append(" " * width, style=f"on {pid_color(seg.owner)}")
            labels.append(_label(seg.owner, width), style="bold")
        time_marks += f"{seg.end_time:>{max(width, len(str(seg.end_time)) + 1)}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks


def iter_ticks(segments: List[Segment]) -> Iterator[Tuple[int, Optional[int]]]:
    """
    Yield ``(t, owner)`` for every unit of simulated time covered by the timeline.
    """
    for seg in segments:
        for t in range(seg.start_time, seg.end_time):
            yield t, seg.owner
