import logging
import random

import pytest

from schedsim.algorithms import (
    ALGORITHMS,
    PREEMPTIVE,
    run_algorithm,
    run_all,
    schedule_fcfs,
    schedule_rr,
    schedule_sjf,
    schedule_srtf,
)
from schedsim.errors import InvalidBurst, InvalidQuantum, UnknownAlgorithm
from schedsim.metrics import summarize_process_metrics
from schedsim.models import IDLE, Process, Segment
from schedsim.timeline import check_timeline


def _procs(*triples):
    return [Process(pid, arrival_time=a, burst_time=b) for pid, a, b in triples]


def _spans(result):
    return [(s.owner, s.start_time, s.end_time) for s in result.timeline]


def _ends(result):
    return {m.pid: m.completion_time for m in result.processes}


def _run(name, procs, quantum=2):
    return ALGORITHMS[name](procs, quantum=quantum)


def _random_workloads(count=40, seed=1234):
    rng = random.Random(seed)
    workloads = []
    for _ in range(count):
        n = rng.randint(1, 8)
        pids = rng.sample(range(-5, 100), n)
        workloads.append(_procs(*[(pid, rng.randint(0, 15), rng.randint(1, 9)) for pid in pids]))
    return workloads


def test_rr_golden_trace():
    res = schedule_rr(_procs((1, 0, 5), (2, 1, 3), (3, 2, 1)), quantum=2)
    assert res.dispatch_order == [1, 2, 3, 1, 2, 1]
    assert _spans(res) == [(1, 0, 2), (2, 2, 4), (3, 4, 5), (1, 5, 7), (2, 7, 8), (1, 8, 9)]
    assert _ends(res) == {1: 9, 2: 8, 3: 5}
    assert [m.response_time for m in res.processes] == [0, 1, 2]
    assert [m.waiting_time for m in res.processes] == [4, 4, 2]
    assert res.quantum == 2


def test_srtf_textbook_example():
    res = schedule_srtf(_procs((1, 0, 7), (2, 2, 4), (3, 4, 1), (4, 5, 4)))
    assert res.completion_order == [3, 2, 4, 1]
    assert _ends(res) == {1: 16, 2: 7, 3: 5, 4: 11}
    assert _spans(res) == [(1, 0, 2), (2, 2, 4), (3, 4, 5), (2, 5, 7), (4, 7, 11), (1, 11, 16)]

    summary = summarize_process_metrics(res.processes)
    assert summary["avg_turnaround"] == pytest.approx(7.0)
    assert summary["avg_waiting"] == pytest.approx(3.0)
    assert summary["avg_response"] == pytest.approx(0.5)


def test_srtf_keeps_running_process_when_arrival_is_longer():
    res = schedule_srtf(_procs((1, 0, 4), (2, 1, 9), (3, 2, 6)))
    assert _spans(res) == [(1, 0, 4), (3, 4, 10), (2, 10, 19)]


def test_srtf_tie_on_remaining_prefers_earlier_arrival():
    # At t=2 both have 3 units left; pid 1 arrived first and keeps the CPU.
    res = schedule_srtf(_procs((1, 0, 5), (2, 2, 3)))
    assert _spans(res) == [(1, 0, 5), (2, 5, 8)]


def test_sjf_picks_shortest_arrived():
    res = schedule_sjf(_procs((1, 0, 8), (2, 1, 4), (3, 2, 9), (4, 3, 5)))
    assert res.dispatch_order == [1, 2, 4, 3]
    assert _ends(res) == {1: 8, 2: 12, 4: 17, 3: 26}


def test_fcfs_order_and_waiting():
    res = schedule_fcfs(_procs((1, 0, 5), (2, 1, 3), (3, 2, 8)))
    assert res.dispatch_order == [1, 2, 3]
    assert [m.waiting_time for m in res.processes] == [0, 4, 6]
    assert res.quantum is None


def test_rr_enqueues_arrivals_before_requeue():
    # pid 2 arrives exactly when pid 1's slice ends and must go first.
    res = schedule_rr(_procs((1, 0, 3), (2, 2, 2)), quantum=2)
    assert _spans(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 5)]


def test_rr_lone_process_segments_coalesce():
    res = schedule_rr(_procs((7, 0, 5)), quantum=1)
    assert _spans(res) == [(7, 0, 5)]
    assert res.system.context_switches == 0


def test_rr_rejects_bad_quantum():
    with pytest.raises(InvalidQuantum):
        schedule_rr(_procs((1, 0, 1)), quantum=0)
    with pytest.raises(InvalidQuantum):
        schedule_rr(_procs((1, 0, 1)), quantum=None)


@pytest.mark.parametrize("name", ["fcfs", "sjf", "srtf", "rr"])
def test_idle_gap_single_process(name):
    res = _run(name, _procs((1, 5, 3)))
    assert res.timeline == [Segment(IDLE, 0, 5), Segment(1, 5, 8)]
    m = res.metrics_for(1)
    assert (m.start_time, m.completion_time) == (5, 8)
    assert (m.response_time, m.waiting_time, m.turnaround_time) == (0, 0, 3)
    assert res.system.idle_time == 5


@pytest.mark.parametrize("name", ["fcfs", "sjf", "srtf", "rr"])
def test_idle_gap_between_processes(name):
    res = _run(name, _procs((1, 0, 2), (2, 5, 1)))
    assert _spans(res) == [(1, 0, 2), (IDLE, 2, 5), (2, 5, 6)]


@pytest.mark.parametrize("name", ["fcfs", "sjf", "srtf", "rr"])
def test_arbitrary_pids_and_table_order(name):
    procs = _procs((42, 3, 2), (-1, 0, 4), (1000, 0, 1))
    res = _run(name, procs)
    # Metrics come back in table order regardless of pid values.
    assert [m.pid for m in res.processes] == [42, -1, 1000]
    assert set(res.dispatch_order) == {42, -1, 1000}
    assert not check_timeline(res.timeline)


@pytest.mark.parametrize("name", ["fcfs", "sjf", "srtf", "rr"])
def test_timeline_and_metric_invariants(name):
    for procs in _random_workloads():
        res = _run(name, procs, quantum=3)
        assert not check_timeline(res.timeline), procs
        assert res.timeline[0].start_time == 0
        assert res.system.cpu_busy_time == sum(p.burst_time for p in procs)

        for p, m in zip(procs, res.processes):
            assert m.start_time >= p.arrival_time
            if name in PREEMPTIVE:
                assert m.completion_time - m.start_time >= p.burst_time
            else:
                assert m.completion_time - m.start_time == p.burst_time
            assert m.waiting_time >= 0
            assert m.turnaround_time == m.waiting_time + p.burst_time

        summary = summarize_process_metrics(res.processes)
        n = len(procs)
        total_turnaround = sum(m.completion_time - p.arrival_time for p, m in zip(procs, res.processes))
        assert summary["avg_turnaround"] * n == pytest.approx(total_turnaround)


def test_equal_bursts_make_sjf_match_fcfs():
    procs = _procs((3, 2, 4), (1, 0, 4), (2, 2, 4), (9, 11, 4), (5, 20, 4))
    assert _spans(schedule_sjf(procs)) == _spans(schedule_fcfs(procs))


def test_simultaneous_arrivals_make_srtf_match_sjf():
    for procs in _random_workloads(seed=99):
        at_zero = [Process(p.pid, 0, p.burst_time) for p in procs]
        assert _spans(schedule_srtf(at_zero)) == _spans(schedule_sjf(at_zero))


def test_large_quantum_makes_rr_match_fcfs():
    for procs in _random_workloads(seed=7):
        q = max(p.burst_time for p in procs)
        assert _spans(schedule_rr(procs, quantum=q)) == _spans(schedule_fcfs(procs))


def test_fcfs_ties_broken_by_pid():
    res = schedule_fcfs(_procs((5, 0, 3), (2, 0, 3)))
    assert res.dispatch_order == [2, 5]


def test_run_algorithm_validates_and_dispatches():
    procs = _procs((1, 0, 2))
    assert run_algorithm("SRTF", procs).algorithm.startswith("SRTF")
    with pytest.raises(UnknownAlgorithm):
        run_algorithm("priority", procs)
    with pytest.raises(InvalidQuantum):
        run_algorithm("rr", procs, quantum=None)


def test_run_all_validates_before_running_anything():
    with pytest.raises(InvalidBurst):
        run_all(_procs((1, 0, 2), (2, 1, 0)), quantum=2)


def test_run_all_default_order():
    results = run_all(_procs((1, 0, 5), (2, 1, 3), (3, 2, 1)), quantum=2)
    assert list(results) == ["fcfs", "sjf", "srtf", "rr"]
    assert results["rr"].dispatch_order == [1, 2, 3, 1, 2, 1]


def test_rr_queue_holds_each_unfinished_process_once(caplog):
    with caplog.at_level(logging.DEBUG, logger="schedsim.algorithms"):
        for procs in _random_workloads(seed=21):
            caplog.clear()
            res = schedule_rr(procs, quantum=2)
            snapshots = [r.args for r in caplog.records if r.msg == "RR: t=%d queue %s"]
            assert snapshots
            for clock, queue in snapshots:
                assert len(queue) == len(set(queue))
                # Completed processes are never queued again.
                for i in queue:
                    assert res.processes[i].completion_time > clock
