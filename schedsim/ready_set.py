from __future__ import annotations

import heapq
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .errors import InternalInvariantViolation
from .models import Process
from .ordering import by_arrival, rank_key


class AdmissionList:
    """
    Processes not yet admitted to a ready structure, in arrival order.
    """

    def __init__(self, processes: Sequence[Process]) -> None:
        self._processes = processes
        self._order = by_arrival(processes)
        self._cursor = 0

    def admit(self, clock: int) -> List[int]:
        """
        Return every pending index whose arrival is <= clock, in arrival order.
        """
        admitted: List[int] = []
        while self._cursor < len(self._order):
            idx = self._order[self._cursor]
            if self._processes[idx].arrival_time > clock:
                break
            admitted.append(idx)
            self._cursor += 1
        return admitted

    @property
    def next_arrival(self) -> Optional[int]:
        """Arrival time of the next pending process, or None when exhausted."""
        if self.exhausted:
            return None
        return self._processes[self._order[self._cursor]].arrival_time

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._order)

    def __len__(self) -> int:
        return len(self._order) - self._cursor


class ReadySet:
    """
    Min-heap of process indices ranked by an explicit key function.

    The key is evaluated when an index is inserted; if the value it depends
    on changes, the index has to be extracted and inserted again.
    """

    def __init__(self, key: Callable[[int], Tuple]) -> None:
        self._key = key
        self._heap: List[Tuple[Tuple, int]] = []
        self._members: Set[int] = set()

    def insert(self, index: int) -> None:
        if index in self._members:
            raise InternalInvariantViolation(f"process index {index} is already in the ready set")
        heapq.heappush(self._heap, (self._key(index), index))
        self._members.add(index)

    def extract_min(self) -> int:
        if not self._heap:
            raise InternalInvariantViolation("extract from an empty ready set")
        _, index = heapq.heappop(self._heap)
        self._members.discard(index)
        return index

    def peek_min(self) -> int:
        if not self._heap:
            raise InternalInvariantViolation("peek into an empty ready set")
        return self._heap[0][1]

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)


def burst_selector(processes: Sequence[Process]) -> ReadySet:
    """Ready set for SJF: ranked by total burst time."""
    # Index is appended so duplicate pids never compare equal.
    return ReadySet(lambda i: rank_key(processes[i].burst_time, processes[i]) + (i,))


def remaining_selector(processes: Sequence[Process], remaining: List[int]) -> ReadySet:
    """Ready set for SRTF: ranked by remaining time at insertion."""
    return ReadySet(lambda i: rank_key(remaining[i], processes[i]) + (i,))
