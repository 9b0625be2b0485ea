from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .models import Job

_ID_KEYS = ("id", "pid")
_ARRIVAL_KEYS = ("arrival_time", "arrivalTime")
_BURST_KEYS = ("burst_time", "burstTime")


def load_workload(path: str | Path, max_jobs: Optional[int] = None) -> List[Job]:
    """
    Load a workload from a JSON or CSV file into a list of Job objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        jobs = _load_json(path)
    elif suffix == ".csv":
        jobs = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    if max_jobs is not None and len(jobs) > max_jobs:
        raise ValueError(f"Workload has {len(jobs)} jobs; at most {max_jobs} are allowed")
    return jobs


def _load_json(path: Path) -> List[Job]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of job objects")

    return [job_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Job]:
    jobs: List[Job] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        try:
            for row in reader:
                jobs.append(job_from_mapping(row))
        except csv.Error as exc:
            raise ValueError(f"Malformed CSV workload at line {reader.line_num}: {exc}") from exc
    return jobs


def _first(mapping: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    raise KeyError(keys[0])


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected an integer, got {value!r}")


def job_from_mapping(mapping: Mapping[str, Any]) -> Job:
    try:
        job_id = str(_first(mapping, _ID_KEYS)).strip()
        arrival_time = _as_int(_first(mapping, _ARRIVAL_KEYS))
        burst_time = _as_int(_first(mapping, _BURST_KEYS))
        priority_val = mapping.get("priority")
        priority = _as_int(priority_val) if priority_val not in (None, "") else None
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid job entry: {mapping!r}") from exc

    if not job_id:
        raise ValueError(f"Invalid job entry (empty id): {mapping!r}")

    return Job(
        id=job_id,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
