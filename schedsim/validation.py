from __future__ import annotations

from typing import List, Optional, Sequence

from .errors import ConfigurationError
from .models import Job
from .policies import Algorithm


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_quantum(quantum) -> None:
    if not _is_int(quantum) or quantum <= 0:
        raise ConfigurationError(f"Round Robin requires a positive integer quantum, got {quantum!r}")


def validate_priorities(jobs: Sequence[Job]) -> None:
    invalid = [j.id for j in jobs if not _is_int(j.priority) or j.priority < 1]
    if invalid:
        raise ConfigurationError(
            "priority scheduling requires an integer priority >= 1 for every job; "
            f"missing or invalid for: {', '.join(map(str, invalid))}"
        )


def validate_jobs(jobs: Sequence[Job]) -> None:
    seen: set[str] = set()
    duplicates: List[str] = []
    for j in jobs:
        if j.id in seen:
            duplicates.append(j.id)
        seen.add(j.id)
    if duplicates:
        raise ConfigurationError(f"job ids must be unique; duplicated: {', '.join(map(str, duplicates))}")

    negative = [j.id for j in jobs if j.arrival_time < 0]
    if negative:
        raise ConfigurationError(f"arrival times must be >= 0; negative for: {', '.join(map(str, negative))}")


def validate_run(algorithm: Algorithm, jobs: Sequence[Job], quantum: Optional[int]) -> None:
    """
    Check everything a run needs before simulation starts.

    Raises ConfigurationError on the first problem found.
    """
    validate_jobs(jobs)
    if algorithm.requires_priority:
        validate_priorities(jobs)
    if algorithm.requires_quantum:
        validate_quantum(quantum)
