from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

Number = Union[int, float]


@dataclass
class Process:
    pid: str
    arrival_time: Number
    burst_time: Number
    priority: Optional[Number] = None


@dataclass
class RunProcess:
    """
    Owned, per-run copy of a process. The engine mutates only these.
    """

    pid: str
    arrival_time: Number
    burst_time: Number
    priority: Number
    remaining: Number
    done: bool = False
    queued: bool = False
    start_time: Optional[Number] = None
    end_time: Optional[Number] = None


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: Number
    end_time: Number

    @property
    def duration(self) -> Number:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: str
    arrival_time: Number
    burst_time: Number
    priority: Number
    start_time: Number
    completion_time: Number
    turnaround_time: Number
    waiting_time: Number


@dataclass
class SystemMetrics:
    makespan: Number
    cpu_busy_time: Number
    cpu_utilization: float
    throughput: float
    mean_waiting: float
    mean_turnaround: float


@dataclass
class RunContext:
    context_switch: Number = 0
    quantum: Optional[Number] = None


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[Number]
    context_switch: Number = 0
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
