from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError, InternalConsistencyError

NOT_AVAILABLE = "n/a"
IDLE_LABEL = "idle"


@dataclass(frozen=True)
class Job:
    id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None


@dataclass
class JobRunState:
    """
    Mutable per-run copy of a Job. Owned by a single scheduler invocation.
    """

    id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int]
    index: int
    remaining: int
    started: bool = False
    first_dispatch_time: Optional[int] = None
    completed: bool = False
    completion_time: Optional[int] = None

    @classmethod
    def from_job(cls, job: Job, index: int) -> "JobRunState":
        return cls(
            id=job.id,
            arrival_time=job.arrival_time,
            burst_time=job.burst_time,
            priority=job.priority,
            index=index,
            remaining=job.burst_time,
        )

    def dispatch(self, time: int) -> None:
        if not self.started:
            self.started = True
            self.first_dispatch_time = time

    def complete(self, time: int) -> None:
        self.remaining = 0
        self.completed = True
        self.completion_time = time


@dataclass(frozen=True)
class TimeSlice:
    """
    One contiguous interval of the timeline. job_id is None for idle time.
    """

    job_id: Optional[str]
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_idle(self) -> bool:
        return self.job_id is None

    @property
    def label(self) -> str:
        return IDLE_LABEL if self.job_id is None else self.job_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.label,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "isIdle": self.is_idle,
        }


def _or_na(value: Optional[int]) -> Any:
    return NOT_AVAILABLE if value is None else value


@dataclass
class JobMetrics:
    id: str
    arrival_time: int
    burst_time: int
    completion_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    waiting_time: Optional[int] = None
    response_time: Optional[int] = None
    priority: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.completion_time is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "arrival": self.arrival_time,
            "burst": self.burst_time,
            "completion": _or_na(self.completion_time),
            "turnaround": _or_na(self.turnaround_time),
            "waiting": _or_na(self.waiting_time),
            "responseTime": _or_na(self.response_time),
        }
        if self.priority is not None:
            data["priority"] = self.priority
        return data


@dataclass
class AverageMetrics:
    avg_turnaround_time: float = 0.0
    avg_waiting_time: float = 0.0
    completed_count: int = 0
    # False when no job completed and the averages are placeholders.
    meaningful: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avgTurnaroundTime": self.avg_turnaround_time,
            "avgWaitingTime": self.avg_waiting_time,
        }


@dataclass
class MetricsReport:
    per_job: List[JobMetrics] = field(default_factory=list)
    average: AverageMetrics = field(default_factory=AverageMetrics)

    def for_job(self, job_id: str) -> JobMetrics:
        for m in self.per_job:
            if m.id == job_id:
                return m
        raise KeyError(job_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "perJob": [m.to_dict() for m in self.per_job],
            "average": self.average.to_dict(),
        }


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    avg_response_time: float = 0.0
    starvation_count: int = 0


class Outcome(str, Enum):
    COMPLETED = "completed"
    CONFIGURATION_ERROR = "configuration-error"
    INTERNAL_ERROR = "internal-error"


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    timeline: List[TimeSlice] = field(default_factory=list)
    metrics: MetricsReport = field(default_factory=MetricsReport)
    outcome: Outcome = Outcome.COMPLETED
    message: Optional[str] = None
    anomalies: List[str] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.COMPLETED

    def raise_for_outcome(self) -> None:
        """
        Raise the exception matching a failed outcome; no-op on success.
        """
        if self.outcome is Outcome.CONFIGURATION_ERROR:
            raise ConfigurationError(self.message or "invalid scheduler configuration")
        if self.outcome is Outcome.INTERNAL_ERROR:
            raise InternalConsistencyError(self.message or "scheduler consistency fault")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "quantum": self.quantum,
            "outcome": self.outcome.value,
            "message": self.message,
            "anomalies": list(self.anomalies),
            "timeSlices": [s.to_dict() for s in self.timeline],
            "metrics": self.metrics.to_dict(),
        }
