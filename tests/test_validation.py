import logging

import pytest

from schedsim.errors import (
    InvalidArrival,
    InvalidBurst,
    InvalidProcessCount,
    InvalidQuantum,
    SchedulerError,
    WorkloadError,
)
from schedsim.models import Process
from schedsim.validation import validate_quantum, validate_workload


def test_valid_workload_passes():
    validate_workload([Process(1, 0, 1)], quantum=3, require_quantum=True)


@pytest.mark.parametrize(
    "procs, quantum, error",
    [
        ([], None, InvalidProcessCount),
        ([Process(1, -1, 2)], None, InvalidArrival),
        ([Process(1, 0, 0)], None, InvalidBurst),
        ([Process(1, 0, -3)], None, InvalidBurst),
        ([Process(1, 0, 2)], 0, InvalidQuantum),
        ([Process(1, 0, 2)], -2, InvalidQuantum),
    ],
)
def test_invalid_workloads(procs, quantum, error):
    with pytest.raises(error):
        validate_workload(procs, quantum)


def test_quantum_required_for_round_robin():
    with pytest.raises(InvalidQuantum):
        validate_workload([Process(1, 0, 2)], None, require_quantum=True)
    assert validate_quantum(4) == 4


def test_errors_are_value_errors():
    assert issubclass(InvalidBurst, WorkloadError)
    assert issubclass(WorkloadError, ValueError)
    assert issubclass(WorkloadError, SchedulerError)


def test_duplicate_pids_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="schedsim.validation"):
        validate_workload([Process(1, 0, 2), Process(1, 3, 2)])
    assert "Duplicate pids" in caplog.text
