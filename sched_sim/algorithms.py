from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .errors import MalformedInputError
from .metrics import MetricsAccumulator
from .models import Process, ProcessMetrics, RunState, ScheduleResult
from .policies import (
    DEFAULT_QUANTUM,
    DispatchPolicy,
    FCFSPolicy,
    PriorityPolicy,
    RoundRobinPolicy,
    SRTFPolicy,
)
from .timeline import TimelineRecorder

logger = logging.getLogger(__name__)


def validate_processes(processes: Sequence[Process]) -> None:
    """
    Reject a workload before any run touches it, so a run never starts on
    a partially valid set.
    """
    seen: set[int] = set()
    for p in processes:
        for field_name in ("pid", "arrival_time", "burst_time", "priority"):
            value = getattr(p, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedInputError(f"Process {p.pid!r}: {field_name} must be an integer, got {value!r}")
        if p.pid <= 0:
            raise MalformedInputError(f"Process id must be positive, got {p.pid}")
        if p.pid in seen:
            raise MalformedInputError(f"Duplicate process id {p.pid}")
        if p.burst_time <= 0:
            raise MalformedInputError(f"Process {p.pid}: burst must be positive, got {p.burst_time}")
        if p.arrival_time < 0:
            raise MalformedInputError(f"Process {p.pid}: arrival must be non-negative, got {p.arrival_time}")
        seen.add(p.pid)


def schedule_fcfs(processes: Sequence[Process], reuse_wait_on_zero_arrival: bool = False) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive), computed in closed form.

    Processes are serviced in the order given; nothing is re-sorted.

    With ``reuse_wait_on_zero_arrival`` set, a non-first process arriving at
    t=0 reports the previous process's wait instead of its own backlog. This
    mirrors the legacy report's numbers; the timeline always shows the real
    CPU occupancy.
    """
    validate_processes(processes)

    service_time = 0
    wait = 0
    timeline = TimelineRecorder()
    accumulator = MetricsAccumulator()
    rows: List[ProcessMetrics] = []

    for i, p in enumerate(processes):
        if i == 0 or p.arrival_time > 0 or not reuse_wait_on_zero_arrival:
            wait = max(service_time - p.arrival_time, 0)

        start = wait + p.arrival_time
        turnaround = p.burst_time + wait
        completion = start + p.burst_time

        cpu_start = max(service_time, p.arrival_time)
        service_time = cpu_start + p.burst_time
        timeline.record(p.pid, cpu_start, service_time)

        accumulator.record_completion(p.pid, wait, turnaround, completion)
        rows.append(_row(p, wait, turnaround, completion))

    result = ScheduleResult(
        algorithm=FCFSPolicy.name,
        quantum=None,
        processes=rows,
        timeline=list(timeline.slices()),
        metrics=accumulator.finalize(len(processes), cpu_busy_time=timeline.busy_time),
    )
    logger.debug("%s: %d processes, makespan %d", result.algorithm, len(rows), result.metrics.makespan)
    return result


def simulate(processes: Sequence[Process], policy: DispatchPolicy) -> ScheduleResult:
    """
    Tick-by-tick simulation shared by the preemptive policies.

    Each tick: admit arrivals (input order), let the policy pick a ready
    process, run it for one unit while every other ready process waits,
    and retire it once its remaining burst hits zero. When nothing is
    ready the clock jumps to the next arrival and no slice is recorded.
    """
    validate_processes(processes)

    states = [RunState.start(p) for p in processes]
    pending: List[RunState] = list(states)
    ready: List[RunState] = []

    timeline = TimelineRecorder()
    accumulator = MetricsAccumulator()

    time = 0
    last_pid: Optional[int] = None

    while len(accumulator) < len(states):
        if pending:
            arrived = [s for s in pending if s.process.arrival_time <= time]
            if arrived:
                pending = [s for s in pending if s.process.arrival_time > time]
                ready.extend(arrived)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("%s: t=%d admitted %s", policy.name, time, [s.pid for s in arrived])

        if not ready:
            next_arrival = min(s.process.arrival_time for s in pending)
            logger.debug("%s: CPU idle from t=%d to t=%d", policy.name, time, next_arrival)
            time = next_arrival
            last_pid = None
            continue

        index = policy.select_next(ready)
        current = ready[index]
        if last_pid is not None and last_pid != current.pid:
            logger.debug("%s: t=%d switch %s -> %s", policy.name, time, last_pid, current.pid)

        current.remaining -= 1
        for state in ready:
            if state is not current:
                state.waited += 1

        timeline.record(current.pid, time, time + 1)
        time += 1

        completed = current.done
        if completed:
            ready.pop(index)
            turnaround = current.waited + current.process.burst_time
            accumulator.record_completion(current.pid, current.waited, turnaround, time)
            logger.debug("%s: t=%d process %s completed (wait=%d)", policy.name, time, current.pid, current.waited)

        policy.after_tick(ready, index, completed)
        last_pid = current.pid

    rows = []
    for state in states:
        wait, turnaround, completion = accumulator.completion_of(state.pid)
        rows.append(_row(state.process, wait, turnaround, completion))

    return ScheduleResult(
        algorithm=policy.name,
        quantum=policy.quantum,
        processes=rows,
        timeline=list(timeline.slices()),
        metrics=accumulator.finalize(len(states), cpu_busy_time=timeline.busy_time),
    )


def schedule_srtf(processes: Sequence[Process]) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    return simulate(processes, SRTFPolicy())


def schedule_priority(processes: Sequence[Process]) -> ScheduleResult:
    """
    Preemptive priority scheduling; lower value means higher priority.
    """
    return simulate(processes, PriorityPolicy())


def schedule_rr(processes: Sequence[Process], quantum: int = DEFAULT_QUANTUM) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    return simulate(processes, RoundRobinPolicy(quantum))


def _row(p: Process, wait: int, turnaround: int, completion: int) -> ProcessMetrics:
    return ProcessMetrics(
        pid=p.pid,
        priority=p.priority,
        burst_time=p.burst_time,
        arrival_time=p.arrival_time,
        waiting_time=wait,
        turnaround_time=turnaround,
        completion_time=completion,
    )


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": lambda processes, quantum=None, legacy_fcfs=False: schedule_fcfs(
        processes, reuse_wait_on_zero_arrival=legacy_fcfs
    ),
    "srtf": lambda processes, quantum=None, legacy_fcfs=False: schedule_srtf(processes),
    "priority": lambda processes, quantum=None, legacy_fcfs=False: schedule_priority(processes),
    "rr": lambda processes, quantum=None, legacy_fcfs=False: schedule_rr(
        processes, DEFAULT_QUANTUM if quantum is None else quantum
    ),
}

# "sjf" is what the legacy report called the preemptive shortest-remaining policy.
ALIASES = {"sjf": "srtf", "round-robin": "rr"}

DEFAULT_ORDER = ("fcfs", "srtf", "priority", "rr")


def resolve_algorithm(name: str) -> str:
    key = name.lower()
    key = ALIASES.get(key, key)
    if key not in ALGORITHMS:
        raise ValueError(f"Unknown or unimplemented algorithm '{name}'")
    return key


def run_algorithm(
    name: str,
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    legacy_fcfs: bool = False,
) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum only matters for round-robin,
    ``legacy_fcfs`` only for FCFS (see ``schedule_fcfs``).
    """
    return ALGORITHMS[resolve_algorithm(name)](processes, quantum=quantum, legacy_fcfs=legacy_fcfs)


def run_all(
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    algorithms: Iterable[str] = DEFAULT_ORDER,
    legacy_fcfs: bool = False,
) -> List[ScheduleResult]:
    keys = [resolve_algorithm(name) for name in algorithms]
    # Validate up front so a bad workload fails before the first run.
    validate_processes(processes)
    return [ALGORITHMS[key](processes, quantum=quantum, legacy_fcfs=legacy_fcfs) for key in keys]
