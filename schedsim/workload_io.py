from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from .models import Number, Process

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def processes_from_records(records: Iterable[Mapping]) -> List[Process]:
    return [_process_from_mapping(entry) for entry in records]


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return processes_from_records(raw)


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return processes_from_records(reader)


def parse_number(value) -> Number:
    """Integral values stay ints so tables print ``5`` rather than ``5.0``."""
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, (int, float)):
        number = value
    else:
        number = float(str(value).strip())
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"]).strip()
        arrival_time = parse_number(mapping["arrival_time"])
        burst_time = parse_number(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority: Optional[Number] = (
            parse_number(priority_val) if priority_val not in (None, "") else None
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
