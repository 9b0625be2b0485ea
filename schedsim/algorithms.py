from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Union

from .errors import ConfigurationError, InternalConsistencyError
from .metrics import compute_metrics, compute_system_metrics
from .models import Job, JobRunState, Outcome, ScheduleResult, TimeSlice
from .policies import Algorithm, Discipline
from .validation import validate_run

logger = logging.getLogger(__name__)


class _Run:
    """
    Clock, timeline and per-job state for a single scheduler invocation.

    Arrivals are consumed through a cursor over the jobs sorted by arrival
    time (ties keep input order).
    """

    def __init__(self, jobs: Sequence[Job]) -> None:
        self.states = [JobRunState.from_job(j, i) for i, j in enumerate(jobs)]
        self.arrivals = sorted(self.states, key=lambda s: s.arrival_time)
        self.cursor = 0
        self.time = 0
        self.timeline: List[TimeSlice] = []
        self.anomalies: List[str] = []

    @property
    def pending(self) -> bool:
        return self.cursor < len(self.arrivals)

    def next_arrival(self) -> int:
        return self.arrivals[self.cursor].arrival_time

    def upcoming(self) -> List[JobRunState]:
        return self.arrivals[self.cursor :]

    def admit(self) -> List[JobRunState]:
        """
        Take every job that has arrived by the current time.

        Jobs with a non-positive burst are completed on the spot and not
        returned.
        """
        admitted: List[JobRunState] = []
        while self.pending and self.next_arrival() <= self.time:
            state = self.arrivals[self.cursor]
            self.cursor += 1
            if state.burst_time <= 0:
                self.complete_anomaly(state)
            else:
                admitted.append(state)
        return admitted

    def complete_anomaly(self, state: JobRunState) -> None:
        at = max(self.time, state.arrival_time)
        message = f"job {state.id} has non-positive burst time ({state.burst_time}); completed instantly at t={at}"
        logger.warning(message)
        self.anomalies.append(message)
        state.dispatch(at)
        state.complete(at)

    def idle_until(self, end: int) -> None:
        if end <= self.time:
            raise InternalConsistencyError(f"idle period ending at t={end} does not advance the clock from t={self.time}")
        logger.debug("t=%d: CPU idle until t=%d", self.time, end)
        self.timeline.append(TimeSlice(job_id=None, start_time=self.time, end_time=end))
        self.time = end

    def execute(self, state: JobRunState, duration: int) -> None:
        state.dispatch(self.time)
        start = self.time
        self.time += duration
        state.remaining -= duration
        self.timeline.append(TimeSlice(job_id=state.id, start_time=start, end_time=self.time))
        logger.debug("t=%d: %s ran until t=%d (remaining %d)", start, state.id, self.time, state.remaining)
        if state.remaining == 0:
            state.complete(self.time)

    def completed_states(self) -> List[JobRunState]:
        return [s for s in self.states if s.completed]

    def incomplete_ids(self) -> List[str]:
        return [s.id for s in self.states if not s.completed]


Driver = Callable[[_Run, Algorithm, Optional[int]], None]


def _first_come(run: _Run, algorithm: Algorithm, quantum: Optional[int]) -> None:
    for state in run.arrivals:
        if run.time < state.arrival_time:
            run.idle_until(state.arrival_time)
        if state.burst_time <= 0:
            run.complete_anomaly(state)
            continue
        run.execute(state, state.remaining)


def _drain_ready_queue(run: _Run, algorithm: Algorithm, quantum: Optional[int]) -> None:
    """
    Non-preemptive queue draining: the selected job runs to completion.
    """
    key = algorithm.discipline.select_key
    ready: List[JobRunState] = []

    while ready or run.pending:
        ready.extend(run.admit())
        if not ready:
            if run.pending:
                run.idle_until(run.next_arrival())
            continue

        state = min(ready, key=key)
        ready.remove(state)
        run.execute(state, state.remaining)


def _round_robin(run: _Run, algorithm: Algorithm, quantum: Optional[int]) -> None:
    ready: Deque[JobRunState] = deque()

    while ready or run.pending:
        ready.extend(run.admit())
        if not ready:
            if run.pending:
                run.idle_until(run.next_arrival())
            continue

        state = ready.popleft()
        run.execute(state, min(quantum, state.remaining))

        # Arrivals during the slice queue up ahead of the job just preempted.
        ready.extend(run.admit())
        if not state.completed:
            ready.append(state)


def _next_decision_time(discipline: Discipline, running: JobRunState, upcoming: Sequence[JobRunState], now: int) -> int:
    """
    Earlier of the running job's completion and the first future arrival
    that would preempt it on arrival or has a non-positive burst.
    """
    finish = now + running.remaining
    for arriving in upcoming:
        if arriving.arrival_time >= finish:
            break
        if arriving.arrival_time <= now:
            continue
        if arriving.burst_time <= 0:
            # Completes on admission, which must happen at its own arrival.
            return arriving.arrival_time
        if discipline.preempts_on_arrival(arriving, running, arriving.arrival_time - now):
            return arriving.arrival_time
    return finish


def _event_driven(run: _Run, algorithm: Algorithm, quantum: Optional[int]) -> None:
    """
    Preemptive scheduling that only stops at decision points: completions and
    arrivals that would take the CPU away from the running job.
    """
    discipline = algorithm.discipline
    ready: List[JobRunState] = []
    running: Optional[JobRunState] = None

    while ready or run.pending or running is not None:
        ready.extend(run.admit())

        if ready:
            best = min(ready, key=discipline.select_key)
            if running is None:
                ready.remove(best)
                running = best
            elif discipline.preempts(best, running):
                logger.debug("t=%d: %s preempts %s", run.time, best.id, running.id)
                ready.remove(best)
                ready.append(running)
                running = best

        if running is None:
            if not run.pending:
                break
            run.idle_until(run.next_arrival())
            continue

        decision = _next_decision_time(discipline, running, run.upcoming(), run.time)
        if decision <= run.time:
            raise InternalConsistencyError(
                f"{algorithm.label}: clock failed to advance at t={run.time} while {running.id} was running"
            )
        run.execute(running, decision - run.time)
        if running.completed:
            running = None

    incomplete = run.incomplete_ids()
    if incomplete:
        raise InternalConsistencyError(
            f"{algorithm.label}: simulation stalled at t={run.time} with incomplete jobs: {', '.join(map(str, incomplete))}"
        )


def _build_result(
    algorithm: Union[Algorithm, str],
    jobs: Sequence[Job],
    quantum: Optional[int],
    run: Optional[_Run] = None,
    outcome: Outcome = Outcome.COMPLETED,
    message: Optional[str] = None,
) -> ScheduleResult:
    label = algorithm.label if isinstance(algorithm, Algorithm) else str(algorithm)
    completed = run.completed_states() if run is not None else []
    result = ScheduleResult(
        algorithm=label,
        quantum=quantum,
        timeline=list(run.timeline) if run is not None else [],
        metrics=compute_metrics(jobs, completed),
        outcome=outcome,
        message=message,
        anomalies=list(run.anomalies) if run is not None else [],
    )
    compute_system_metrics(result)
    return result


def _simulate(algorithm: Algorithm, jobs: Sequence[Job], quantum: Optional[int], driver: Driver) -> ScheduleResult:
    jobs = list(jobs)
    if not algorithm.requires_quantum:
        quantum = None

    try:
        validate_run(algorithm, jobs, quantum)
    except ConfigurationError as exc:
        logger.error("%s: %s", algorithm.label, exc)
        return _build_result(algorithm, jobs, quantum, outcome=Outcome.CONFIGURATION_ERROR, message=str(exc))

    logger.debug("%s: scheduling %d jobs", algorithm.label, len(jobs))
    run = _Run(jobs)
    try:
        driver(run, algorithm, quantum)
    except InternalConsistencyError as exc:
        logger.error("%s", exc)
        return _build_result(algorithm, jobs, quantum, run, outcome=Outcome.INTERNAL_ERROR, message=str(exc))

    return _build_result(algorithm, jobs, quantum, run)


def schedule_fcfs(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    return _simulate(Algorithm.FCFS, jobs, quantum, _first_come)


def schedule_sjf(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among jobs that have arrived and are not yet
    completed, choose the one with the smallest burst time. Ties go to the
    more urgent priority (jobs without one last), then earlier arrival,
    then id.
    """
    return _simulate(Algorithm.SJF, jobs, quantum, _drain_ready_queue)


def schedule_priority(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready jobs,
    choose the one with the smallest priority; break ties by earlier arrival
    time, then id. Every job must carry an integer priority >= 1.
    """
    return _simulate(Algorithm.PRIORITY, jobs, quantum, _drain_ready_queue)


def schedule_rr(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    return _simulate(Algorithm.ROUND_ROBIN, jobs, quantum, _round_robin)


def schedule_srtf(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).

    A queued job preempts only with strictly less remaining time.
    """
    return _simulate(Algorithm.SRTF, jobs, quantum, _event_driven)


def schedule_priority_preemptive(jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive Priority scheduling.

    A queued job preempts only with a strictly lower priority number.
    """
    return _simulate(Algorithm.PRIORITY_PREEMPTIVE, jobs, quantum, _event_driven)


ALGORITHMS: Dict[Algorithm, Callable[..., ScheduleResult]] = {
    Algorithm.FCFS: schedule_fcfs,
    Algorithm.SJF: schedule_sjf,
    Algorithm.SRTF: schedule_srtf,
    Algorithm.PRIORITY: schedule_priority,
    Algorithm.PRIORITY_PREEMPTIVE: schedule_priority_preemptive,
    Algorithm.ROUND_ROBIN: schedule_rr,
}


def run_algorithm(name: Union[str, Algorithm], jobs: Sequence[Job], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm by id or alias.

    An unknown name yields a configuration-error result instead of raising.
    """
    algorithm = name if isinstance(name, Algorithm) else Algorithm.parse(name)
    if algorithm is None:
        message = f"Unknown algorithm '{name}'"
        logger.error(message)
        return _build_result(str(name), list(jobs), quantum, outcome=Outcome.CONFIGURATION_ERROR, message=message)

    return ALGORITHMS[algorithm](jobs, quantum=quantum)
