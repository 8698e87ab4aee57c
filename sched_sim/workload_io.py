from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Mapping, Sequence

from .errors import MalformedInputError
from .models import Process

logger = logging.getLogger(__name__)

# Column order of a headerless CSV row: id, burst, arrival[, priority].
POSITIONAL_FIELDS = ("id", "burst", "arrival", "priority")
REQUIRED_FIELDS = ("id", "burst", "arrival")


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.

    Anything that is not ``.json`` is read as CSV.
    """
    path = Path(path)

    if path.suffix.lower() == ".json":
        processes = _load_json(path)
    else:
        processes = _load_csv(path)

    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise MalformedInputError("JSON workload must be a list of process objects")

    return [process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        rows = [row for row in csv.reader(f) if row and not row[0].lstrip().startswith("#")]
    return parse_rows(rows)


def parse_rows(rows: Sequence[Sequence[str]]) -> List[Process]:
    """
    Turn CSV rows into processes. A first row whose cells name the columns
    (``id,burst,arrival[,priority]`` in any order) is used as the header;
    otherwise rows are read positionally.
    """
    rows = [[cell.strip() for cell in row] for row in rows if any(cell.strip() for cell in row)]
    if not rows:
        return []

    header = [cell.lower() for cell in rows[0]]
    if set(REQUIRED_FIELDS) <= set(header):
        unknown = [name for name in header if name not in POSITIONAL_FIELDS]
        if unknown:
            raise MalformedInputError(f"Unknown column(s) in header: {', '.join(unknown)}")
        processes = []
        for row in rows[1:]:
            if len(row) > len(header):
                raise MalformedInputError(f"Too many fields in process row: {row!r}")
            processes.append(process_from_mapping(dict(zip(header, row))))
        return processes

    processes: List[Process] = []
    for row in rows:
        if len(row) > len(POSITIONAL_FIELDS):
            raise MalformedInputError(f"Too many fields in process row: {row!r}")
        processes.append(process_from_mapping(dict(zip(POSITIONAL_FIELDS, row))))
    return processes


def process_from_mapping(mapping: Mapping) -> Process:
    if not isinstance(mapping, Mapping):
        raise MalformedInputError(f"Invalid process entry: {mapping!r}")

    missing = [name for name in REQUIRED_FIELDS if mapping.get(name) in (None, "")]
    if missing:
        raise MalformedInputError(f"Process entry {dict(mapping)!r} is missing {', '.join(missing)}")

    priority_val = mapping.get("priority")
    return Process(
        pid=_to_int(mapping, "id"),
        burst_time=_to_int(mapping, "burst"),
        arrival_time=_to_int(mapping, "arrival"),
        priority=0 if priority_val in (None, "") else _to_int(mapping, "priority"),
    )


def _to_int(mapping: Mapping, name: str) -> int:
    value = mapping[name]
    # JSON can hand over bools and floats, which int() would accept.
    if isinstance(value, bool) or isinstance(value, float):
        raise MalformedInputError(f"Field '{name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"Field '{name}' must be an integer, got {value!r}") from exc
