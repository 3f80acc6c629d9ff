from __future__ import annotations

from typing import List, Optional

from .models import Segment

_NOTHING_OPEN = object()


class SegmentBuilder:
    """
    Accumulates the Gantt timeline one dispatch at a time.

    The open segment has no end until the owner changes or the builder is
    closed, so repeated dispatches of the same owner coalesce for free.
    """

    def __init__(self, start_time: int = 0) -> None:
        self._segments: List[Segment] = []
        self._owner = _NOTHING_OPEN
        self._start = start_time

    @property
    def is_open(self) -> bool:
        return self._owner is not _NOTHING_OPEN

    @property
    def current_owner(self) -> Optional[int]:
        """Owner of the open segment; also None when nothing is open (see ``is_open``)."""
        return self._owner if self.is_open else None

    def switch_to(self, owner: Optional[int], clock: int) -> None:
        """Make ``owner`` the occupant of the CPU from ``clock`` on."""
        if self.is_open and self._owner == owner:
            return
        self._close_open(clock)

        last = self._segments[-1] if self._segments else None
        if last is not None and last.owner == owner and last.end_time == clock:
            # The segment in between was empty; resume the previous one.
            self._segments.pop()
            self._owner = owner
            self._start = last.start_time
            return

        self._owner = owner
        self._start = clock

    def close(self, clock: int) -> List[Segment]:
        self._close_open(clock)
        self._owner = _NOTHING_OPEN
        return list(self._segments)

    def _close_open(self, clock: int) -> None:
        if not self.is_open:
            return
        if clock > self._start:
            self._segments.append(Segment(owner=self._owner, start_time=self._start, end_time=clock))


def check_timeline(segments: List[Segment]) -> List[str]:
    """
    Return a description of every invariant the timeline breaks
    (empty list when the timeline is contiguous and coalesced).
    """
    problems: List[str] = []
    for k, seg in enumerate(segments):
        if seg.start_time >= seg.end_time:
            problems.append(f"segment {k} is empty: [{seg.start_time}, {seg.end_time})")
        if k == 0:
            continue
        prev = segments[k - 1]
        if prev.end_time < seg.start_time:
            problems.append(f"gap between segments {k - 1} and {k}: [{prev.end_time}, {seg.start_time})")
        elif prev.end_time > seg.start_time:
            problems.append(f"segments {k - 1} and {k} overlap at {seg.start_time}")
        if prev.owner == seg.owner:
            problems.append(f"segments {k - 1} and {k} share owner {seg.owner!r}")
    return problems
