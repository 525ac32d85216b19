from __future__ import annotations

import logging
from typing import Dict, List

from .errors import EmptyProcessSet
from .models import ProcessMetrics, ScheduleResult, SystemMetrics

logger = logging.getLogger(__name__)


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute makespan, CPU utilization, throughput and the mean waiting and
    turnaround times given populated per-process metrics and timeline slices.

    Utilization is the fraction of the makespan spent on useful work
    (sum of bursts / makespan); context-switch overhead and idle gaps count
    against it.
    """
    summary = summarize_process_metrics(result.processes)

    makespan = max(p.completion_time for p in result.processes)
    if makespan <= 0:
        raise EmptyProcessSet("Makespan is zero; no work was scheduled")

    total_burst = sum(p.burst_time for p in result.processes)
    cpu_busy_time = sum(slice_.duration for slice_ in result.timeline)

    system = SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=total_burst / makespan,
        throughput=len(result.processes) / makespan,
        mean_waiting=summary["avg_waiting"],
        mean_turnaround=summary["avg_turnaround"],
    )
    result.system = system
    logger.debug(
        "%s: makespan=%s utilization=%.3f",
        result.algorithm,
        makespan,
        system.cpu_utilization,
    )
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> Dict[str, float]:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        raise EmptyProcessSet("Cannot aggregate metrics over an empty process set")

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
