"""
CPU scheduling simulator.

Runs FCFS, SJF, SRTF, Round Robin and Priority scheduling over a process set
with a configurable context-switch cost, and reports the execution timeline
together with per-process and system metrics.
"""

from .algorithms import Policy, run_algorithm
from .errors import (
    EmptyProcessSet,
    InvalidContextSwitch,
    InvalidProcess,
    InvalidQuantum,
    SchedulingError,
)
from .models import Process, RunContext, ScheduleResult, ScheduledSlice

__all__ = [
    "EmptyProcessSet",
    "InvalidContextSwitch",
    "InvalidProcess",
    "InvalidQuantum",
    "Policy",
    "Process",
    "RunContext",
    "ScheduleResult",
    "ScheduledSlice",
    "SchedulingError",
    "run_algorithm",
]
