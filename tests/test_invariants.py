from collections import defaultdict

import pytest

from schedsim.algorithms import Policy, run_algorithm
from schedsim.models import Process

WORKLOADS = {
    "staggered": [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
        Process("P4", arrival_time=3, burst_time=6, priority=2),
    ],
    "with_idle_gap": [
        Process("A", arrival_time=0, burst_time=2),
        Process("B", arrival_time=6, burst_time=3),
        Process("C", arrival_time=7, burst_time=1),
    ],
    "real_valued": [
        Process("A", arrival_time=0, burst_time=2.5),
        Process("B", arrival_time=0.5, burst_time=1.25),
        Process("C", arrival_time=1, burst_time=3.75),
    ],
}

SIMULTANEOUS = [
    Process("A", arrival_time=0, burst_time=5),
    Process("B", arrival_time=0, burst_time=3),
    Process("C", arrival_time=0, burst_time=4),
    Process("D", arrival_time=0, burst_time=1),
]


def _run(policy, processes, context_switch):
    quantum = 2 if policy.needs_quantum else None
    return run_algorithm(policy, processes, quantum=quantum, context_switch=context_switch)


@pytest.mark.parametrize("policy", list(Policy))
@pytest.mark.parametrize("workload", sorted(WORKLOADS))
@pytest.mark.parametrize("context_switch", [0, 1, 0.5])
def test_completion_fields_are_consistent(policy, workload, context_switch):
    res = _run(policy, WORKLOADS[workload], context_switch)

    for p in res.processes:
        assert p.completion_time >= p.start_time >= p.arrival_time
        assert p.turnaround_time == pytest.approx(p.completion_time - p.arrival_time)
        assert p.waiting_time == pytest.approx(p.turnaround_time - p.burst_time)
        assert p.waiting_time >= 0


@pytest.mark.parametrize("policy", list(Policy))
@pytest.mark.parametrize("workload", sorted(WORKLOADS))
@pytest.mark.parametrize("context_switch", [0, 1, 0.5])
def test_slices_cover_each_burst_exactly(policy, workload, context_switch):
    res = _run(policy, WORKLOADS[workload], context_switch)

    executed = defaultdict(float)
    for sl in res.timeline:
        assert sl.duration > 0
        executed[sl.pid] += sl.duration

    for p in WORKLOADS[workload]:
        assert executed[p.pid] == pytest.approx(p.burst_time)


@pytest.mark.parametrize("policy", list(Policy))
@pytest.mark.parametrize("workload", sorted(WORKLOADS))
def test_slices_are_chronological_and_disjoint(policy, workload):
    res = _run(policy, WORKLOADS[workload], 1)

    for prev, nxt in zip(res.timeline, res.timeline[1:]):
        assert prev.start_time < prev.end_time <= nxt.start_time


@pytest.mark.parametrize("policy", list(Policy))
@pytest.mark.parametrize("context_switch", [0, 1, 2])
def test_gaps_equal_switch_cost_without_idle_time(policy, context_switch):
    res = _run(policy, SIMULTANEOUS, context_switch)

    for prev, nxt in zip(res.timeline, res.timeline[1:]):
        gap = nxt.start_time - prev.end_time
        if prev.pid == nxt.pid:
            assert gap == 0
        else:
            assert gap == context_switch


@pytest.mark.parametrize("policy", list(Policy))
def test_utilization_matches_burst_over_makespan(policy):
    procs = WORKLOADS["staggered"]
    res = _run(policy, procs, 1)

    total_burst = sum(p.burst_time for p in procs)
    makespan = max(p.completion_time for p in res.processes)
    assert res.system.makespan == makespan
    assert 0 < res.system.cpu_utilization <= 1
    assert res.system.cpu_utilization == pytest.approx(total_burst / makespan)


def test_fcfs_dispatch_follows_arrival_order():
    procs = [
        Process("C", arrival_time=4, burst_time=1),
        Process("A", arrival_time=0, burst_time=2),
        Process("D", arrival_time=4, burst_time=3),
        Process("B", arrival_time=1, burst_time=1),
    ]
    res = run_algorithm(Policy.FCFS, procs)
    assert [s.pid for s in res.timeline] == ["A", "B", "C", "D"]
