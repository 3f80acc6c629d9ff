from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by schedsim."""


class WorkloadError(SchedulerError, ValueError):
    """The process table or its parameters are not usable."""


class InvalidProcessCount(WorkloadError):
    pass


class InvalidArrival(WorkloadError):
    pass


class InvalidBurst(WorkloadError):
    pass


class InvalidQuantum(WorkloadError):
    pass


class InvalidWorkloadEntry(WorkloadError):
    """A workload record or file could not be parsed."""


class UnknownAlgorithm(SchedulerError, ValueError):
    pass


class InternalInvariantViolation(SchedulerError, RuntimeError):
    """
    A driver reached a state that valid input can never produce, e.g. an
    empty ready set with incomplete processes and no future arrival.
    """
