from __future__ import annotations

from typing import List, Tuple

from .models import ScheduledSlice


class TimelineRecorder:
    """
    Collects execution slices for one run.

    Back-to-back slices of the same process are merged, so the finished
    timeline holds one slice per maximal stretch of CPU ownership.
    """

    def __init__(self) -> None:
        self._slices: List[ScheduledSlice] = []

    def record(self, pid: int, start: int, stop: int) -> None:
        if start >= stop:
            raise ValueError(f"Empty or inverted slice for process {pid}: [{start}, {stop})")

        if self._slices:
            last = self._slices[-1]
            if start < last.end_time:
                raise ValueError(
                    f"Slice [{start}, {stop}) for process {pid} overlaps "
                    f"[{last.start_time}, {last.end_time}) of process {last.pid}"
                )
            if last.pid == pid and last.end_time == start:
                self._slices[-1] = ScheduledSlice(pid=pid, start_time=last.start_time, end_time=stop)
                return

        self._slices.append(ScheduledSlice(pid=pid, start_time=start, end_time=stop))

    def slices(self) -> Tuple[ScheduledSlice, ...]:
        return tuple(self._slices)

    @property
    def busy_time(self) -> int:
        return sum(s.duration for s in self._slices)

    def __len__(self) -> int:
        return len(self._slices)
