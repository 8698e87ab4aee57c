from __future__ import annotations


class SchedulerError(Exception):
    """Base class for errors raised by the scheduling simulator."""


class InvalidArgsError(SchedulerError):
    """The command line did not name exactly one workload file."""


class MalformedInputError(SchedulerError, ValueError):
    """A process record is missing a required field or is not an integer."""


class EmptyReadySetError(SchedulerError, RuntimeError):
    """A policy was asked to pick a process while nothing was ready."""
