"""
Scheduling simulator package.

Replays a fixed set of processes under FCFS, shortest-remaining-time-first,
preemptive priority and round-robin dispatch, and reports per-process wait,
turnaround and completion times together with the execution timeline.
"""

from .algorithms import run_algorithm, run_all, simulate
from .models import Process, ScheduleResult

__all__ = ["Process", "ScheduleResult", "run_algorithm", "run_all", "simulate", "cli"]
