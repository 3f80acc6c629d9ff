from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List

from .models import ScheduleResult

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["algorithm", "pid", "arrival", "burst", "start", "end", "response", "waiting", "turnaround"]


def result_rows(result: ScheduleResult) -> List[dict]:
    """One row per process, in input order."""
    return [
        {
            "algorithm": result.algorithm,
            "pid": m.pid,
            "arrival": m.arrival_time,
            "burst": m.burst_time,
            "start": m.start_time,
            "end": m.completion_time,
            "response": m.response_time,
            "waiting": m.waiting_time,
            "turnaround": m.turnaround_time,
        }
        for m in result.processes
    ]


def write_results_csv(results: Iterable[ScheduleResult], path: str | Path) -> int:
    """
    Write per-process rows for every result to ``path``; returns the row count.
    """
    path = Path(path)
    count = 0
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for result in results:
            rows = result_rows(result)
            writer.writerows(rows)
            count += len(rows)

    logger.info("Wrote %d rows to %s", count, path)
    return count
