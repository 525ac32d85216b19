from __future__ import annotations

from typing import Dict, List, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .algorithms import coalesce_slices
from .models import Number, ScheduledSlice


def format_time(t: Number) -> str:
    if float(t).is_integer():
        return str(int(t))
    return f"{t:.2f}".rstrip("0").rstrip(".")


def _cells(t: Number) -> int:
    return int(round(t))


def _prepare(slices: Sequence[ScheduledSlice]) -> List[ScheduledSlice]:
    return coalesce_slices(sorted(slices, key=lambda s: (s.start_time, s.end_time)))


def render_gantt(slices: Sequence[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart. One character per time unit; ``.`` marks time
    where no process holds the CPU (idle or context switch).
    """
    if not slices:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = "0"
    last_time: Number = 0

    for sl in _prepare(slices):
        gap = _cells(sl.start_time) - _cells(last_time)
        if sl.start_time > last_time:
            line += "." * gap
            labels += " " * gap
            last_time = sl.start_time
            time_marks += f"{format_time(last_time):>3}"

        width = max(1, _cells(sl.end_time) - _cells(sl.start_time))
        line += "=" * width
        labels += sl.pid[:width].ljust(width)
        last_time = sl.end_time
        time_marks += f"{format_time(last_time):>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(slices: Sequence[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time: Number = 0

    for sl in _prepare(slices):
        if sl.start_time > last_time:
            gap = _cells(sl.start_time) - _cells(last_time)
            timeline.append(" " * gap)
            labels.append(" " * gap)
            last_time = sl.start_time
            time_marks += f"{format_time(last_time):>3}"

        width = max(1, _cells(sl.end_time) - _cells(sl.start_time))
        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(sl.pid[:width].ljust(width), style="bold")

        last_time = sl.end_time
        time_marks += f"{format_time(last_time):>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
