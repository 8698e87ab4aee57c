import logging

import pytest

from sched_sim.algorithms import (
    ALGORITHMS,
    run_algorithm,
    run_all,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_srtf,
    simulate,
)
from sched_sim.errors import EmptyReadySetError, MalformedInputError
from sched_sim.models import Process, RunState
from sched_sim.policies import FCFSPolicy, PriorityPolicy, RoundRobinPolicy, SRTFPolicy


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5, priority=2),
        Process(2, arrival_time=1, burst_time=3, priority=1),
        Process(3, arrival_time=2, burst_time=8, priority=3),
    ]


def _spans(result):
    return [(s.pid, s.start_time, s.end_time) for s in result.timeline]


def _waits(result):
    return [p.waiting_time for p in result.processes]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert _spans(res) == [(1, 0, 5), (2, 5, 8), (3, 8, 16)]
    assert _waits(res) == [0, 4, 6]
    assert [p.completion_time for p in res.processes] == [5, 8, 16]


def test_fcfs_same_arrival_textbook():
    procs = [
        Process(1, arrival_time=0, burst_time=24),
        Process(2, arrival_time=0, burst_time=3),
        Process(3, arrival_time=0, burst_time=3),
    ]
    res = schedule_fcfs(procs)
    assert _waits(res) == [0, 24, 27]
    assert [p.turnaround_time for p in res.processes] == [24, 27, 30]
    assert res.metrics.average_wait == 17.0
    assert res.metrics.average_turnaround == 27.0
    assert res.metrics.throughput == pytest.approx(0.1)


def test_fcfs_keeps_input_order():
    procs = [
        Process(1, arrival_time=3, burst_time=2),
        Process(2, arrival_time=0, burst_time=1),
    ]
    res = schedule_fcfs(procs)
    assert [s.pid for s in res.timeline] == [1, 2]


def test_fcfs_idle_gap_before_late_arrival():
    procs = [
        Process(1, arrival_time=0, burst_time=2),
        Process(2, arrival_time=5, burst_time=3),
    ]
    res = schedule_fcfs(procs)
    assert _spans(res) == [(1, 0, 2), (2, 5, 8)]
    assert _waits(res) == [0, 0]
    assert res.processes[1].completion_time == 8


def test_fcfs_legacy_zero_arrival_wait_reuse():
    procs = [
        Process(1, arrival_time=2, burst_time=4),
        Process(2, arrival_time=0, burst_time=3),
    ]
    assert _waits(schedule_fcfs(procs)) == [0, 6]

    legacy = schedule_fcfs(procs, reuse_wait_on_zero_arrival=True)
    assert _waits(legacy) == [0, 0]
    assert [p.completion_time for p in legacy.processes] == [6, 3]
    # The timeline still shows when the CPU was actually busy.
    assert _spans(legacy) == [(1, 2, 6), (2, 6, 9)]


def test_srtf_preempts_on_shorter_arrival():
    res = schedule_srtf(_procs())
    assert _spans(res) == [(1, 0, 1), (2, 1, 4), (1, 4, 8), (3, 8, 16)]
    assert _waits(res) == [3, 0, 6]
    assert [p.completion_time for p in res.processes] == [8, 4, 16]


def test_srtf_textbook_averages():
    procs = [
        Process(1, arrival_time=0, burst_time=8),
        Process(2, arrival_time=1, burst_time=4),
        Process(3, arrival_time=2, burst_time=9),
        Process(4, arrival_time=3, burst_time=5),
    ]
    res = schedule_srtf(procs)
    assert res.timeline[1].pid == 2
    assert res.timeline[1].start_time == 1
    assert _waits(res) == [9, 0, 15, 2]
    assert res.metrics.average_wait == 6.5
    assert res.metrics.average_turnaround == 13.0


def test_srtf_tie_goes_to_earlier_admission():
    procs = [
        Process(7, arrival_time=0, burst_time=2),
        Process(3, arrival_time=0, burst_time=2),
    ]
    res = schedule_srtf(procs)
    assert _spans(res) == [(7, 0, 2), (3, 2, 4)]


def test_priority_static():
    res = schedule_priority(_procs())
    assert res.timeline[0].pid == 1
    assert res.timeline[1].pid == 2
    assert _spans(res) == [(1, 0, 1), (2, 1, 4), (1, 4, 8), (3, 8, 16)]


def test_priority_lower_value_runs_first_regardless_of_input_order():
    procs = [
        Process(1, arrival_time=0, burst_time=3, priority=2),
        Process(2, arrival_time=0, burst_time=3, priority=1),
    ]
    res = schedule_priority(procs)
    assert _spans(res) == [(2, 0, 3), (1, 3, 6)]
    # Rows stay in input order.
    assert [p.pid for p in res.processes] == [1, 2]
    assert [p.completion_time for p in res.processes] == [6, 3]


def test_priority_tie_keeps_admission_order():
    procs = [
        Process(1, arrival_time=0, burst_time=2, priority=1),
        Process(2, arrival_time=0, burst_time=1, priority=1),
    ]
    res = schedule_priority(procs)
    assert _spans(res) == [(1, 0, 2), (2, 2, 3)]


def test_rr_strict_alternation():
    procs = [
        Process(1, arrival_time=0, burst_time=2),
        Process(2, arrival_time=0, burst_time=2),
    ]
    res = schedule_rr(procs, quantum=1)
    assert _spans(res) == [(1, 0, 1), (2, 1, 2), (1, 2, 3), (2, 3, 4)]
    assert _waits(res) == [1, 2]


def test_rr_quantum_2():
    res = schedule_rr(_procs(), quantum=2)
    assert _spans(res) == [
        (1, 0, 2),
        (2, 2, 4),
        (3, 4, 6),
        (1, 6, 8),
        (2, 8, 9),
        (3, 9, 11),
        (1, 11, 12),
        (3, 12, 16),
    ]
    assert _waits(res) == [7, 5, 6]
    assert res.metrics.cpu_busy_time == sum(p.burst_time for p in _procs())


def test_rr_new_arrival_joins_the_tail():
    procs = [
        Process(1, arrival_time=0, burst_time=3),
        Process(2, arrival_time=0, burst_time=3),
        Process(3, arrival_time=1, burst_time=1),
    ]
    res = schedule_rr(procs, quantum=1)
    assert _spans(res) == [(1, 0, 1), (2, 1, 2), (3, 2, 3), (1, 3, 4), (2, 4, 5), (1, 5, 6), (2, 6, 7)]


def test_rr_arrival_does_not_cut_the_running_quantum():
    procs = [
        Process(1, arrival_time=0, burst_time=4),
        Process(2, arrival_time=1, burst_time=1),
    ]
    res = schedule_rr(procs, quantum=3)
    assert _spans(res) == [(1, 0, 3), (2, 3, 4), (1, 4, 5)]
    assert _waits(res) == [1, 2]


def test_rr_lone_process_is_one_slice():
    res = schedule_rr([Process(1, arrival_time=0, burst_time=3)], quantum=1)
    assert _spans(res) == [(1, 0, 3)]


def test_rr_rejects_non_positive_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)


@pytest.mark.parametrize("schedule", [schedule_srtf, schedule_priority, schedule_rr])
def test_idle_cpu_before_first_arrival(schedule):
    res = schedule([Process(1, arrival_time=3, burst_time=2)])
    assert _spans(res) == [(1, 3, 5)]
    assert res.processes[0].waiting_time == 0
    assert res.processes[0].turnaround_time == 2
    assert res.metrics.throughput == pytest.approx(0.2)


def test_idle_gap_between_arrivals():
    procs = [
        Process(1, arrival_time=0, burst_time=2),
        Process(2, arrival_time=5, burst_time=2),
    ]
    res = schedule_rr(procs)
    assert _spans(res) == [(1, 0, 2), (2, 5, 7)]
    assert res.metrics.cpu_utilization == pytest.approx(4 / 7)


def test_out_of_order_arrivals_are_admitted_on_time():
    procs = [
        Process(1, arrival_time=2, burst_time=1),
        Process(2, arrival_time=0, burst_time=3),
    ]
    res = schedule_srtf(procs)
    # At t=2 both have one tick left; the earlier-admitted process keeps the CPU.
    assert _spans(res) == [(2, 0, 3), (1, 3, 4)]


WORKLOADS = [
    _procs(),
    [
        Process(1, arrival_time=0, burst_time=8, priority=3),
        Process(2, arrival_time=1, burst_time=4, priority=1),
        Process(3, arrival_time=2, burst_time=9, priority=4),
        Process(4, arrival_time=3, burst_time=5, priority=2),
    ],
    [
        Process(1, arrival_time=1, burst_time=2, priority=1),
        Process(2, arrival_time=1, burst_time=6, priority=1),
        Process(3, arrival_time=9, burst_time=1, priority=0),
        Process(4, arrival_time=12, burst_time=3, priority=5),
    ],
]


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
@pytest.mark.parametrize("procs", WORKLOADS)
def test_schedule_invariants(name, procs):
    res = run_algorithm(name, procs, quantum=2)

    for row in res.processes:
        assert row.turnaround_time == row.waiting_time + row.burst_time

    for p in procs:
        ran = sum(s.duration for s in res.timeline if s.pid == p.pid)
        assert ran == p.burst_time

    for a, b in zip(res.timeline, res.timeline[1:]):
        assert a.start_time < a.end_time <= b.start_time
        if a.end_time == b.start_time:
            assert a.pid != b.pid

    assert res.metrics.average_wait >= 0
    assert res.metrics.average_turnaround >= res.metrics.average_wait


@pytest.mark.parametrize("name", sorted(ALGORITHMS))
def test_runs_are_repeatable_and_do_not_touch_input(name):
    procs = _procs()
    snapshot = list(procs)
    first = run_algorithm(name, procs, quantum=2)
    second = run_algorithm(name, procs, quantum=2)
    assert first == second
    assert procs == snapshot


def test_run_all_default_order():
    results = run_all(_procs())
    assert [r.algorithm for r in results] == [
        "First-come, first-serve",
        "Shortest-remaining-time-first",
        "Priority",
        "Round-robin",
    ]
    assert results[-1].quantum == 1


def test_sjf_alias_runs_srtf():
    assert run_algorithm("SJF", _procs()) == schedule_srtf(_procs())


def test_unknown_algorithm():
    with pytest.raises(ValueError, match="Unknown"):
        run_algorithm("lottery", _procs())


def test_empty_workload():
    res = schedule_srtf([])
    assert res.timeline == []
    assert res.metrics.throughput == 0.0


@pytest.mark.parametrize(
    "procs",
    [
        [Process(1, 0, 2), Process(1, 1, 2)],
        [Process(0, 0, 2)],
        [Process(1, 0, 0)],
        [Process(1, -1, 2)],
        [Process(1, 0, "2")],
    ],
)
def test_invalid_workload_rejected_before_running(procs):
    with pytest.raises(MalformedInputError):
        run_all(procs)


def test_policies_refuse_empty_ready_set():
    for policy in (FCFSPolicy(), SRTFPolicy(), PriorityPolicy(), RoundRobinPolicy()):
        with pytest.raises(EmptyReadySetError):
            policy.select_next([])


def test_srtf_policy_picks_smallest_remaining():
    ready = [RunState.start(Process(1, 0, 5)), RunState.start(Process(2, 0, 2))]
    assert SRTFPolicy().select_next(ready) == 1


def test_simulate_accepts_any_policy_instance():
    res = simulate(_procs(), RoundRobinPolicy(quantum=100))
    assert [s.pid for s in res.timeline] == [1, 2, 3]
    assert res.quantum == 100


def test_fcfs_policy_under_the_driver_matches_closed_form():
    ticked = simulate(_procs(), FCFSPolicy())
    closed = schedule_fcfs(_procs())
    assert ticked.timeline == closed.timeline
    assert ticked.processes == closed.processes


def test_legacy_fcfs_through_the_registry():
    procs = [
        Process(1, arrival_time=0, burst_time=24),
        Process(2, arrival_time=0, burst_time=3),
        Process(3, arrival_time=0, burst_time=3),
    ]
    assert _waits(run_algorithm("fcfs", procs, legacy_fcfs=True)) == [0, 0, 0]
    assert _waits(run_all(procs, algorithms=["fcfs"], legacy_fcfs=True)[0]) == [0, 0, 0]
    # Other policies ignore the flag.
    assert run_algorithm("srtf", procs, legacy_fcfs=True) == schedule_srtf(procs)


def test_driver_debug_log(caplog):
    with caplog.at_level(logging.DEBUG, logger="sched_sim"):
        schedule_srtf(_procs())
    assert "t=0 admitted [1]" in caplog.text
    assert "t=1 switch 1 -> 2" in caplog.text
    assert "process 2 completed (wait=0)" in caplog.text
