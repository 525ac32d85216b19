import pytest

from schedsim.algorithms import schedule_fcfs
from schedsim.errors import EmptyProcessSet
from schedsim.metrics import compute_system_metrics, summarize_process_metrics
from schedsim.models import Process, ScheduleResult


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5),
        Process("P2", arrival_time=1, burst_time=3),
        Process("P3", arrival_time=2, burst_time=8),
    ]


def test_full_utilization_without_overhead():
    res = schedule_fcfs(_procs())
    assert res.system.makespan == 16
    assert res.system.cpu_utilization == 1.0
    assert res.system.mean_waiting == pytest.approx(10 / 3)
    assert res.system.mean_turnaround == pytest.approx(26 / 3)
    assert res.system.throughput == pytest.approx(3 / 16)


def test_context_switch_lowers_utilization():
    res = schedule_fcfs(_procs(), context_switch=1)
    assert res.system.makespan == 18
    assert res.system.cpu_utilization == pytest.approx(16 / 18)
    assert res.system.cpu_busy_time == 16
    assert res.system.mean_waiting == pytest.approx(13 / 3)
    assert res.system.mean_turnaround == pytest.approx(29 / 3)


def test_summary_rejects_empty_process_list():
    with pytest.raises(EmptyProcessSet):
        summarize_process_metrics([])


def test_system_metrics_reject_empty_result():
    with pytest.raises(EmptyProcessSet):
        compute_system_metrics(ScheduleResult(algorithm="FCFS", quantum=None))
