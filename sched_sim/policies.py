"""
Dispatch policies.

Every policy answers one question for the simulation driver: which of the
ready processes gets the CPU for the next tick. The driver keeps the ready
list in admission order, so the first minimum found by a scan is also the
earliest-admitted one and ties resolve deterministically.

The FCFS report is computed in closed form (see ``schedule_fcfs``). Under
the driver FCFSPolicy simply keeps the head of the ready list running.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .errors import EmptyReadySetError
from .models import RunState

DEFAULT_QUANTUM = 1


class DispatchPolicy(ABC):
    name: str = ""

    @property
    def quantum(self) -> Optional[int]:
        return None

    @abstractmethod
    def select_next(self, ready: Sequence[RunState]) -> int:
        """Return the index into ``ready`` of the process to run this tick."""

    def after_tick(self, ready: Sequence[RunState], index: int, completed: bool) -> None:
        """
        Called once per executed tick, after a completed process has been
        dropped from ``ready``. ``index`` is where the process that just ran
        sat in the list.
        """


class FCFSPolicy(DispatchPolicy):
    name = "First-come, first-serve"

    def select_next(self, ready: Sequence[RunState]) -> int:
        if not ready:
            raise EmptyReadySetError("FCFS asked to select from an empty ready set")
        return 0


class _RankedPolicy(DispatchPolicy):
    """Runs the ready process with the smallest rank; earliest admission wins ties."""

    def rank(self, state: RunState) -> int:
        raise NotImplementedError

    def select_next(self, ready: Sequence[RunState]) -> int:
        if not ready:
            raise EmptyReadySetError(f"{self.name} asked to select from an empty ready set")
        return min(range(len(ready)), key=lambda i: self.rank(ready[i]))


class SRTFPolicy(_RankedPolicy):
    # Historically reported as "Shortest-job-first".
    name = "Shortest-remaining-time-first"

    def rank(self, state: RunState) -> int:
        return state.remaining


class PriorityPolicy(_RankedPolicy):
    """Lower priority value runs first. Priorities never age."""

    name = "Priority"

    def rank(self, state: RunState) -> int:
        return state.process.priority


class RoundRobinPolicy(DispatchPolicy):
    """
    Rotates through the ready list with a pointer.

    The process under the pointer keeps the CPU for up to ``quantum`` ticks
    or until it completes. New arrivals are appended to the tail of the
    ready list, so they are reached after everything already queued.
    """

    name = "Round-robin"

    def __init__(self, quantum: int = DEFAULT_QUANTUM) -> None:
        if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
            raise ValueError("Round Robin requires a positive integer quantum")
        self._quantum = quantum
        self._pointer = 0
        self._used = 0

    @property
    def quantum(self) -> int:
        return self._quantum

    def select_next(self, ready: Sequence[RunState]) -> int:
        if not ready:
            raise EmptyReadySetError("Round-robin asked to select from an empty ready set")
        if self._pointer >= len(ready):
            self._pointer = 0
        return self._pointer

    def after_tick(self, ready: Sequence[RunState], index: int, completed: bool) -> None:
        if completed:
            # The successor slid into the finished process's slot.
            self._used = 0
            self._pointer = index
        else:
            self._used += 1
            if self._used >= self._quantum:
                self._used = 0
                self._pointer = index + 1

        if self._pointer >= len(ready):
            self._pointer = 0
