"""
The closed set of scheduling algorithms.

Each Algorithm member carries only what its driver needs: whether it runs
with a quantum or needs priorities, and (for the queue-based disciplines)
the ready-queue ordering and the preemption checks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .models import JobRunState

SelectionKey = Callable[[JobRunState], Tuple]
PreemptCheck = Callable[[JobRunState, JobRunState], bool]
ArrivalPreemptCheck = Callable[[JobRunState, JobRunState, int], bool]


def _priority_or_last(state: JobRunState) -> float:
    return state.priority if state.priority is not None else math.inf


def sjf_key(state: JobRunState) -> Tuple:
    return (state.remaining, _priority_or_last(state), state.arrival_time, state.id)


def srtf_key(state: JobRunState) -> Tuple:
    return (state.remaining, state.arrival_time, state.id)


def priority_key(state: JobRunState) -> Tuple:
    return (state.priority, state.arrival_time, state.id)


def shorter_remaining(candidate: JobRunState, running: JobRunState) -> bool:
    return candidate.remaining < running.remaining


def shorter_on_arrival(arriving: JobRunState, running: JobRunState, elapsed: int) -> bool:
    # running.remaining - elapsed is what the running job will have left
    # when `arriving` shows up.
    return arriving.burst_time < running.remaining - elapsed


def more_urgent(candidate: JobRunState, running: JobRunState) -> bool:
    return candidate.priority < running.priority


def more_urgent_on_arrival(arriving: JobRunState, running: JobRunState, elapsed: int) -> bool:
    return arriving.priority < running.priority


@dataclass(frozen=True)
class Discipline:
    select_key: SelectionKey
    preempts: Optional[PreemptCheck] = None
    preempts_on_arrival: Optional[ArrivalPreemptCheck] = None


SJF = Discipline(select_key=sjf_key)
PRIORITY = Discipline(select_key=priority_key)
SRTF = Discipline(select_key=srtf_key, preempts=shorter_remaining, preempts_on_arrival=shorter_on_arrival)
PRIORITY_PREEMPTIVE = Discipline(
    select_key=priority_key,
    preempts=more_urgent,
    preempts_on_arrival=more_urgent_on_arrival,
)


class Algorithm(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf-non"
    SRTF = "sjf-pre"
    PRIORITY = "priority-non"
    PRIORITY_PREEMPTIVE = "priority-pre"
    ROUND_ROBIN = "rr"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def discipline(self) -> Optional[Discipline]:
        return _DISCIPLINES.get(self)

    @property
    def preemptive(self) -> bool:
        return self in (Algorithm.SRTF, Algorithm.PRIORITY_PREEMPTIVE, Algorithm.ROUND_ROBIN)

    @property
    def requires_priority(self) -> bool:
        return self in (Algorithm.PRIORITY, Algorithm.PRIORITY_PREEMPTIVE)

    @property
    def requires_quantum(self) -> bool:
        return self is Algorithm.ROUND_ROBIN

    @classmethod
    def parse(cls, name: str) -> Optional["Algorithm"]:
        """
        Resolve an algorithm id or one of its aliases; None if unknown.
        """
        key = str(name).strip().lower()
        try:
            return cls(key)
        except ValueError:
            return _ALIASES.get(key)


_LABELS: Dict[Algorithm, str] = {
    Algorithm.FCFS: "FCFS",
    Algorithm.SJF: "SJF (non-preemptive)",
    Algorithm.SRTF: "SRTF (preemptive SJF)",
    Algorithm.PRIORITY: "Priority (non-preemptive)",
    Algorithm.PRIORITY_PREEMPTIVE: "Priority (preemptive)",
    Algorithm.ROUND_ROBIN: "Round Robin",
}

_DESCRIPTIONS: Dict[Algorithm, str] = {
    Algorithm.FCFS: "Non-preemptive. Runs jobs in arrival order; short jobs can wait behind long ones.",
    Algorithm.SJF: "Non-preemptive. Picks the shortest ready job; optimal average waiting, risks starving long jobs.",
    Algorithm.SRTF: "Preemptive. A newly arrived job with less remaining time takes the CPU.",
    Algorithm.PRIORITY: "Non-preemptive. Picks the most urgent ready job (lowest priority number).",
    Algorithm.PRIORITY_PREEMPTIVE: "Preemptive. A newly arrived job with a lower priority number takes the CPU.",
    Algorithm.ROUND_ROBIN: "Preemptive. Each job runs for at most one quantum before going to the back of the queue.",
}

_DISCIPLINES: Dict[Algorithm, Discipline] = {
    Algorithm.SJF: SJF,
    Algorithm.SRTF: SRTF,
    Algorithm.PRIORITY: PRIORITY,
    Algorithm.PRIORITY_PREEMPTIVE: PRIORITY_PREEMPTIVE,
}

_ALIASES: Dict[str, Algorithm] = {
    "fifo": Algorithm.FCFS,
    "sjf": Algorithm.SJF,
    "srtf": Algorithm.SRTF,
    "priority": Algorithm.PRIORITY,
    "round-robin": Algorithm.ROUND_ROBIN,
}
