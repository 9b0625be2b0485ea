from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .models import (
    AverageMetrics,
    Job,
    JobMetrics,
    JobRunState,
    MetricsReport,
    ScheduleResult,
    SystemMetrics,
)


def compute_metrics(jobs: Sequence[Job], completed: Iterable[JobRunState]) -> MetricsReport:
    """
    Build per-job and average metrics for the original job list.

    Jobs without a usable completion time in `completed` are reported as not
    available and left out of the averages.
    """
    finished: Dict[str, JobRunState] = {}
    for state in completed:
        if state.completed and state.completion_time is not None and state.completion_time >= 0:
            finished[state.id] = state

    per_job: List[JobMetrics] = []
    total_turnaround = 0
    total_waiting = 0
    completed_count = 0

    for job in jobs:
        state = finished.get(job.id)
        if state is None:
            per_job.append(
                JobMetrics(
                    id=job.id,
                    arrival_time=job.arrival_time,
                    burst_time=job.burst_time,
                    priority=job.priority,
                )
            )
            continue

        turnaround_time = state.completion_time - job.arrival_time
        waiting_time = turnaround_time - job.burst_time
        response_time = None
        if state.first_dispatch_time is not None:
            response_time = state.first_dispatch_time - job.arrival_time

        per_job.append(
            JobMetrics(
                id=job.id,
                arrival_time=job.arrival_time,
                burst_time=job.burst_time,
                completion_time=state.completion_time,
                turnaround_time=turnaround_time,
                waiting_time=waiting_time,
                response_time=response_time,
                priority=job.priority,
            )
        )
        total_turnaround += turnaround_time
        total_waiting += waiting_time
        completed_count += 1

    if completed_count:
        average = AverageMetrics(
            avg_turnaround_time=total_turnaround / completed_count,
            avg_waiting_time=total_waiting / completed_count,
            completed_count=completed_count,
            meaningful=True,
        )
    else:
        average = AverageMetrics()

    return MetricsReport(per_job=per_job, average=average)


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute makespan, throughput and CPU utilization from the timeline and
    the completed jobs' metrics.
    """
    if not result.timeline:
        system = SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = result.timeline[-1].end_time
    cpu_busy_time = sum(s.duration for s in result.timeline if not s.is_idle)
    idle_time = sum(s.duration for s in result.timeline if s.is_idle)

    done = [m for m in result.metrics.per_job if m.completed]
    throughput = len(done) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    responses = [m.response_time for m in done if m.response_time is not None]
    avg_response = sum(responses) / len(responses) if responses else 0.0

    # Starvation is a heuristic: waiting more than twice the average wait.
    avg_wait = result.metrics.average.avg_waiting_time
    starvation_count = sum(1 for m in done if m.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        avg_response_time=avg_response,
        starvation_count=starvation_count,
    )
    result.system = system
    return system
