from __future__ import annotations

from typing import Dict, List, Optional

from .models import RunMetrics, ScheduleResult


class MetricsAccumulator:
    """
    Collects per-process completion figures during a run and derives the
    run-wide averages and throughput once the run is over.
    """

    def __init__(self) -> None:
        self._completions: Dict[int, tuple[int, int, int]] = {}

    def record_completion(self, pid: int, wait: int, turnaround: int, completion: int) -> None:
        if pid in self._completions:
            raise ValueError(f"Process {pid} completed twice")
        self._completions[pid] = (wait, turnaround, completion)

    def completion_of(self, pid: int) -> tuple[int, int, int]:
        return self._completions[pid]

    def __len__(self) -> int:
        return len(self._completions)

    def finalize(self, process_count: int, cpu_busy_time: Optional[int] = None) -> RunMetrics:
        """
        Average wait/turnaround over every recorded completion; throughput is
        ``process_count`` divided by the latest completion time.
        """
        if not self._completions:
            return RunMetrics(average_wait=0.0, average_turnaround=0.0, throughput=0.0)

        n = len(self._completions)
        waits = [w for w, _, _ in self._completions.values()]
        turnarounds = [t for _, t, _ in self._completions.values()]
        makespan = max(c for _, _, c in self._completions.values())

        busy = cpu_busy_time if cpu_busy_time is not None else 0
        return RunMetrics(
            average_wait=sum(waits) / n,
            average_turnaround=sum(turnarounds) / n,
            throughput=process_count / makespan if makespan > 0 else 0.0,
            makespan=makespan,
            cpu_busy_time=busy,
            cpu_utilization=busy / makespan if makespan > 0 else 0.0,
        )


def summarize(results: List[ScheduleResult]) -> List[dict]:
    rows = []
    for result in results:
        m = result.metrics or RunMetrics(0.0, 0.0, 0.0)
        rows.append(
            {
                "algorithm": result.algorithm,
                "quantum": result.quantum,
                "avg_waiting": m.average_wait,
                "avg_turnaround": m.average_turnaround,
                "throughput": m.throughput,
            }
        )
    return rows
