from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class RunState:
    """
    Mutable execution state for one process during a single run.

    A fresh RunState is built for every run, so runs never share counters
    and the input Process records stay untouched.
    """

    process: Process
    remaining: int
    waited: int = 0

    @classmethod
    def start(cls, process: Process) -> "RunState":
        return cls(process=process, remaining=process.burst_time)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def done(self) -> bool:
        return self.remaining == 0


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: int
    priority: int
    burst_time: int
    arrival_time: int
    waiting_time: int
    turnaround_time: int
    completion_time: int


@dataclass
class RunMetrics:
    average_wait: float
    average_turnaround: float
    throughput: float
    makespan: int = 0
    cpu_busy_time: int = 0
    cpu_utilization: float = 0.0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    metrics: Optional[RunMetrics] = None
