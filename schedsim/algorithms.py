from __future__ import annotations

import logging
import math
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Sequence, Union

from .errors import EmptyProcessSet, InvalidContextSwitch, InvalidProcess, InvalidQuantum
from .metrics import compute_system_metrics
from .models import (
    Number,
    Process,
    ProcessMetrics,
    RunContext,
    RunProcess,
    ScheduleResult,
    ScheduledSlice,
)

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2
DEFAULT_CONTEXT_SWITCH = 0

# Clock advance while no process is ready.
IDLE_STEP = 1
# SRTF re-evaluates the ready set after every tick.
TICK = 1
# Relative tolerance below which leftover work counts as finished.
REMAINING_EPSILON = 1e-9


class Policy(Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "srtf"
    RR = "rr"
    PRIORITY = "priority"

    @classmethod
    def parse(cls, name: Union[str, "Policy"]) -> "Policy":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown or unimplemented algorithm '{name}'") from None

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def needs_quantum(self) -> bool:
        return self is Policy.RR

    def run(self, processes: Sequence[Process], context: RunContext) -> ScheduleResult:
        func = ALGORITHMS[self]
        return func(processes, context_switch=context.context_switch, quantum=context.quantum)


_LABELS = {
    Policy.FCFS: "FCFS",
    Policy.SJF: "SJF (non-preemptive)",
    Policy.SRTF: "SRTF",
    Policy.RR: "Round Robin",
    Policy.PRIORITY: "Priority (non-preemptive)",
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def prepare_run(processes: Sequence[Process], context_switch: Number = 0) -> List[RunProcess]:
    """
    Validate a process set and build the per-run copies the policies mutate.

    Every check happens before the clock starts, so an invalid input never
    produces a partial schedule. Processes without an explicit priority get
    their 1-based table position.
    """
    if not processes:
        raise EmptyProcessSet("No processes to schedule")
    if not _is_number(context_switch) or context_switch < 0:
        raise InvalidContextSwitch(
            f"Context switch cost must be a non-negative number, got {context_switch!r}"
        )

    seen: set[str] = set()
    run: List[RunProcess] = []
    for position, p in enumerate(processes, start=1):
        if not isinstance(p.pid, str):
            raise InvalidProcess(f"Process #{position} id must be a string, got {p.pid!r}", pid=p.pid)
        if not p.pid.strip():
            raise InvalidProcess(f"Process #{position} has an empty id")
        if p.pid in seen:
            raise InvalidProcess(f"Duplicate process id '{p.pid}'", pid=p.pid)
        seen.add(p.pid)

        if not _is_number(p.arrival_time) or p.arrival_time < 0:
            raise InvalidProcess(
                f"Process '{p.pid}' has invalid arrival time {p.arrival_time!r}", pid=p.pid
            )
        if not _is_number(p.burst_time) or p.burst_time <= 0:
            raise InvalidProcess(
                f"Process '{p.pid}' has invalid burst time {p.burst_time!r} (must be > 0)",
                pid=p.pid,
            )
        if p.priority is not None and not _is_number(p.priority):
            raise InvalidProcess(f"Process '{p.pid}' has invalid priority {p.priority!r}", pid=p.pid)

        run.append(
            RunProcess(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                priority=p.priority if p.priority is not None else position,
                remaining=p.burst_time,
            )
        )

    return run


def _check_quantum(quantum: Optional[Number]) -> Number:
    if quantum is None or not _is_number(quantum) or quantum <= 0:
        raise InvalidQuantum(f"Round Robin requires a positive quantum (use --quantum), got {quantum!r}")
    return quantum


def coalesce_slices(slices: Sequence[ScheduledSlice]) -> List[ScheduledSlice]:
    """
    Merge consecutive slices of the same process that touch each other into a
    single span. Slices separated by a gap (idle or context switch) stay apart.
    """
    merged: List[ScheduledSlice] = []
    for sl in slices:
        if merged and merged[-1].pid == sl.pid and merged[-1].end_time == sl.start_time:
            merged[-1].end_time = sl.end_time
        else:
            merged.append(ScheduledSlice(pid=sl.pid, start_time=sl.start_time, end_time=sl.end_time))
    return merged


def _idle_until(time: Number, arrivals: Sequence[Number]) -> Number:
    """
    Advance an idle clock in whole IDLE_STEPs to the first step at or after
    the next arrival, without looping once per step.
    """
    next_arrival = min(arrivals)
    steps = max(1, math.ceil((next_arrival - time) / IDLE_STEP))
    if steps > 1 and time + (steps - 1) * IDLE_STEP >= next_arrival:
        steps -= 1
    return time + steps * IDLE_STEP


def _consume(p: RunProcess, amount: Number) -> None:
    p.remaining -= amount
    # Fractional slices leave rounding residue that must not earn another dispatch.
    if p.remaining <= REMAINING_EPSILON * max(1, p.burst_time):
        p.remaining = 0


def _complete(p: RunProcess, time: Number) -> None:
    p.remaining = 0
    p.done = True
    p.end_time = time
    logger.debug("%s completed at t=%s", p.pid, time)


def _run_to_completion(p: RunProcess, time: Number, timeline: List[ScheduledSlice]) -> Number:
    end_time = time + p.burst_time
    p.start_time = time
    timeline.append(ScheduledSlice(pid=p.pid, start_time=time, end_time=end_time))
    logger.debug("%s dispatched [%s-%s]", p.pid, time, end_time)
    _complete(p, end_time)
    return end_time


def _process_metrics(p: RunProcess) -> ProcessMetrics:
    turnaround_time = p.end_time - p.arrival_time
    # Rounding on real-valued times must never yield a negative wait.
    waiting_time = max(0, turnaround_time - p.burst_time)
    return ProcessMetrics(
        pid=p.pid,
        arrival_time=p.arrival_time,
        burst_time=p.burst_time,
        priority=p.priority,
        start_time=p.start_time,
        completion_time=p.end_time,
        turnaround_time=turnaround_time,
        waiting_time=waiting_time,
    )


def _build_result(
    policy: Policy,
    run: List[RunProcess],
    timeline: List[ScheduledSlice],
    context_switch: Number,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    result = ScheduleResult(
        algorithm=policy.label,
        quantum=quantum,
        context_switch=context_switch,
        processes=[_process_metrics(p) for p in run],
        timeline=timeline,
    )
    compute_system_metrics(result)
    logger.info(
        "%s scheduled %d processes in %d slices, makespan %s",
        policy.label,
        len(run),
        len(timeline),
        result.system.makespan,
    )
    return result


def schedule_fcfs(
    processes: Sequence[Process],
    context_switch: Number = 0,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive).

    Processes run in arrival order (ties keep input order). When the CPU is
    idle the clock jumps straight to the next arrival. The quantum is ignored.
    """
    run = prepare_run(processes, context_switch)

    time: Number = 0
    timeline: List[ScheduledSlice] = []

    for i, p in enumerate(sorted(run, key=lambda x: x.arrival_time)):
        if time < p.arrival_time:
            time = p.arrival_time
        if i > 0:
            time += context_switch
        time = _run_to_completion(p, time, timeline)

    return _build_result(Policy.FCFS, run, timeline, context_switch)


def _schedule_by_key(
    run: List[RunProcess],
    key: Callable[[RunProcess], Number],
    context_switch: Number,
) -> List[ScheduledSlice]:
    time: Number = 0
    timeline: List[ScheduledSlice] = []
    completed = 0

    while completed < len(run):
        ready = [p for p in run if not p.done and p.arrival_time <= time]
        if not ready:
            time = _idle_until(time, [p.arrival_time for p in run if not p.done])
            continue

        # min() returns the first minimum, so ties go to the earlier table row.
        p = min(ready, key=key)
        if completed:
            time += context_switch
        time = _run_to_completion(p, time, timeline)
        completed += 1

    return timeline


def schedule_sjf(
    processes: Sequence[Process],
    context_switch: Number = 0,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time. An idle CPU
    advances the clock one unit at a time until something arrives.
    """
    run = prepare_run(processes, context_switch)
    timeline = _schedule_by_key(run, lambda p: p.burst_time, context_switch)
    return _build_result(Policy.SJF, run, timeline, context_switch)


def schedule_priority(
    processes: Sequence[Process],
    context_switch: Number = 0,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Same control flow as
    SJF with the priority as selection key.
    """
    run = prepare_run(processes, context_switch)
    timeline = _schedule_by_key(run, lambda p: p.priority, context_switch)
    return _build_result(Policy.PRIORITY, run, timeline, context_switch)


def schedule_srtf(
    processes: Sequence[Process],
    context_switch: Number = 0,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).

    The ready set is re-evaluated after every tick. The context switch is
    charged whenever the selected process differs from the one that ran the
    previous tick. Per-tick slices are coalesced into contiguous spans.
    """
    run = prepare_run(processes, context_switch)

    time: Number = 0
    ticks: List[ScheduledSlice] = []
    completed = 0
    last: Optional[RunProcess] = None

    while completed < len(run):
        ready = [p for p in run if not p.done and p.arrival_time <= time]
        if not ready:
            time = _idle_until(time, [p.arrival_time for p in run if not p.done])
            continue

        current = min(ready, key=lambda p: p.remaining)
        if last is not None and last is not current:
            time += context_switch
            logger.debug("switch %s -> %s at t=%s", last.pid, current.pid, time)

        if current.start_time is None:
            current.start_time = time

        step = min(TICK, current.remaining)
        ticks.append(ScheduledSlice(pid=current.pid, start_time=time, end_time=time + step))
        time += step
        _consume(current, step)

        if current.remaining <= 0:
            _complete(current, time)
            completed += 1
        last = current

    return _build_result(Policy.SRTF, run, coalesce_slices(ticks), context_switch)


def schedule_rr(
    processes: Sequence[Process],
    context_switch: Number = 0,
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes join a FIFO ready queue once, in arrival order. After each slice,
    processes that arrived during it are queued ahead of the preempted one.
    The context switch is charged only when a different process takes the
    CPU, so the sole ready process keeps running without overhead.
    """
    quantum = _check_quantum(quantum)
    run = prepare_run(processes, context_switch)
    arrival_order = sorted(run, key=lambda p: p.arrival_time)

    time: Number = 0
    timeline: List[ScheduledSlice] = []
    ready: Deque[RunProcess] = deque()
    completed = 0
    previous: Optional[RunProcess] = None

    def enqueue_new_arrivals(current_time: Number) -> None:
        for p in arrival_order:
            if not p.queued and p.arrival_time <= current_time:
                ready.append(p)
                p.queued = True

    while completed < len(run):
        enqueue_new_arrivals(time)
        if not ready:
            time = _idle_until(time, [p.arrival_time for p in arrival_order if not p.queued])
            continue

        p = ready.popleft()
        if previous is not None and previous is not p:
            time += context_switch
        if p.start_time is None:
            p.start_time = time

        run_time = min(quantum, p.remaining)
        timeline.append(ScheduledSlice(pid=p.pid, start_time=time, end_time=time + run_time))
        logger.debug("%s dispatched [%s-%s]", p.pid, time, time + run_time)
        time += run_time
        _consume(p, run_time)

        enqueue_new_arrivals(time)

        if p.remaining > 0:
            ready.append(p)
        else:
            _complete(p, time)
            completed += 1
        previous = p

    return _build_result(Policy.RR, run, timeline, context_switch, quantum=quantum)


ALGORITHMS: Dict[Policy, Callable[..., ScheduleResult]] = {
    Policy.FCFS: schedule_fcfs,
    Policy.SJF: schedule_sjf,
    Policy.SRTF: schedule_srtf,
    Policy.RR: schedule_rr,
    Policy.PRIORITY: schedule_priority,
}


def run_algorithm(
    name: Union[str, Policy],
    processes: Sequence[Process],
    quantum: Optional[Number] = None,
    context_switch: Number = DEFAULT_CONTEXT_SWITCH,
) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. The quantum is only used by
    round-robin.
    """
    policy = Policy.parse(name)
    return policy.run(processes, RunContext(context_switch=context_switch, quantum=quantum))
