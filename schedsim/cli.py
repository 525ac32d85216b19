from __future__ import annotations

import argparse
import logging
import math
import time
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import DEFAULT_CONTEXT_SWITCH, DEFAULT_QUANTUM, Policy, run_algorithm
from .errors import SchedulingError
from .gantt import build_rich_gantt, format_time, render_gantt
from .models import ScheduleResult
from .philosophers import (
    DEFAULT_PHILOSOPHERS,
    PhilosopherState,
    TableState,
    is_deadlocked,
    lock_status,
    new_table,
    toggle_eating,
)
from .workload_io import load_workload, parse_number

logger = logging.getLogger(__name__)

POLICY_NAMES = [p.value for p in Policy]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, RR, Priority).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for every dispatch).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=POLICY_NAMES,
        help="Algorithm to use.",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=parse_number,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (ignored by the others, default: {DEFAULT_QUANTUM}).",
    )
    run_parser.add_argument(
        "--context-switch",
        "-c",
        type=parse_number,
        default=DEFAULT_CONTEXT_SWITCH,
        help="Time charged whenever the CPU changes process (default: 0).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of colored blocks.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=POLICY_NAMES,
        default=POLICY_NAMES,
        help="Algorithms to compare (default: all).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=parse_number,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument(
        "--context-switch",
        "-c",
        type=parse_number,
        default=DEFAULT_CONTEXT_SWITCH,
        help="Time charged whenever the CPU changes process (default: 0).",
    )

    dining_parser = subparsers.add_parser(
        "dining",
        help="Dining philosophers: toggle philosophers and check for deadlock.",
    )
    dining_parser.add_argument(
        "--count",
        "-n",
        type=int,
        default=DEFAULT_PHILOSOPHERS,
        help=f"Number of philosophers (default: {DEFAULT_PHILOSOPHERS}).",
    )
    dining_parser.add_argument(
        "toggles",
        nargs="*",
        type=int,
        help="Philosopher numbers (1-based) to toggle between thinking and eating, in order.",
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {format_time(result.quantum)}")
    if result.context_switch:
        console.print(f"[bold]Context switch:[/bold] {format_time(result.context_switch)}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Turnaround",
        "Wait",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            format_time(p.arrival_time),
            format_time(p.burst_time),
            str(p.priority),
            format_time(p.start_time),
            format_time(p.completion_time),
            format_time(p.turnaround_time),
            format_time(p.waiting_time),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.2f}%")
        sys_table.add_row("Avg waiting", f"{sys.mean_waiting:.2f}")
        sys_table.add_row("Avg turnaround", f"{sys.mean_turnaround:.2f}")
        sys_table.add_row("Makespan", format_time(sys.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")

        console.print(sys_table)


def _run_compare(
    workload_path: Path,
    algorithms: List[str],
    quantum: float,
    context_switch: float,
    console: Console,
) -> None:
    """
    Run each algorithm on a workload and print the summary table.
    """
    processes = load_workload(workload_path)

    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("CPU util.", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")

    for alg in algorithms:
        policy = Policy.parse(alg)
        q = quantum if policy.needs_quantum else None
        result = run_algorithm(policy, processes, quantum=q, context_switch=context_switch)
        sys = result.system
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else format_time(result.quantum),
            f"{sys.cpu_utilization*100:.2f}%",
            f"{sys.mean_waiting:.2f}",
            f"{sys.mean_turnaround:.2f}",
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = max(s.end_time for s in timeline)
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {format_time(makespan)} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(math.ceil(makespan)):
        running = None
        bar = ""
        for sl in timeline:
            if sl.start_time <= t < sl.end_time:
                running = sl.pid
                bar = f"[green]{'█' * int(t - sl.start_time + 1)}[/green]"
                break
        msg = f"t={t:2d}: " + (running or "(idle)")
        console.print(msg + (" " + bar if bar else ""), highlight=False)
        time.sleep(delay)


def _print_table_state(state: TableState, console: Console) -> None:
    table = Table(title="Dining philosophers", box=box.SIMPLE_HEAVY)
    table.add_column("Philosopher", justify="center")
    table.add_column("State")
    table.add_column("Left", justify="center")
    table.add_column("Right", justify="center")

    for i, s in enumerate(state.states):
        left, right = state.neighbours(i)
        style = "green" if s is PhilosopherState.EATING else "dim"
        table.add_row(
            f"P{i + 1}",
            f"[{style}]{s.value}[/{style}]",
            f"C{left + 1}",
            f"C{right + 1}",
        )

    console.print(table)
    console.print(" | ".join(lock_status(state)))
    if is_deadlocked(state):
        console.print("[bold red]Deadlock detected! All philosophers are waiting.[/bold red]")


def _run_dining(count: int, toggles: List[int], console: Console) -> None:
    state = new_table(count)
    for number in toggles:
        updated = toggle_eating(state, number - 1)
        if updated is state:
            console.print(f"[yellow]P{number} cannot eat: a neighbouring chopstick is held.[/yellow]")
        state = updated
    _print_table_state(state, console)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            quantum = args.quantum if Policy.parse(args.algorithm).needs_quantum else None
            result = run_algorithm(
                args.algorithm,
                processes,
                quantum=quantum,
                context_switch=args.context_switch,
            )
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            _run_compare(
                Path(args.workload),
                args.algorithms,
                args.quantum,
                args.context_switch,
                console,
            )
            return 0

        if args.command == "dining":
            _run_dining(args.count, args.toggles, console)
            return 0
    except (SchedulingError, ValueError, IndexError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
