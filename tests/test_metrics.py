import pytest

from schedsim.algorithms import schedule_fcfs
from schedsim.metrics import compute_metrics, compute_system_metrics
from schedsim.models import Job, JobRunState, ScheduleResult


def _finished(job, index, completion, first_dispatch):
    state = JobRunState.from_job(job, index)
    state.dispatch(first_dispatch)
    state.complete(completion)
    return state


def test_compute_metrics_completed_jobs():
    jobs = [Job("A", 0, 4), Job("B", 2, 3)]
    states = [_finished(jobs[0], 0, 4, 0), _finished(jobs[1], 1, 7, 4)]
    report = compute_metrics(jobs, states)

    a, b = report.per_job
    assert (a.completion_time, a.turnaround_time, a.waiting_time, a.response_time) == (4, 4, 0, 0)
    assert (b.completion_time, b.turnaround_time, b.waiting_time, b.response_time) == (7, 5, 2, 2)
    assert report.average.avg_turnaround_time == pytest.approx(4.5)
    assert report.average.avg_waiting_time == pytest.approx(1.0)
    assert report.average.meaningful


def test_averages_only_cover_completed_jobs():
    jobs = [Job("A", 0, 4), Job("B", 2, 3), Job("C", 3, 1)]
    unfinished = JobRunState.from_job(jobs[2], 2)
    report = compute_metrics(jobs, [_finished(jobs[0], 0, 4, 0), unfinished])

    assert report.for_job("A").completed
    assert not report.for_job("B").completed
    assert report.for_job("C").to_dict()["completion"] == "n/a"
    assert report.average.completed_count == 1
    assert report.average.avg_turnaround_time == pytest.approx(4.0)


def test_no_completed_jobs_gives_zero_averages():
    report = compute_metrics([Job("A", 0, 4)], [])
    assert report.average.avg_turnaround_time == 0
    assert report.average.avg_waiting_time == 0
    assert not report.average.meaningful
    assert report.for_job("A").response_time is None


def test_report_follows_input_order_and_keeps_priority():
    jobs = [Job("Z", 5, 1, priority=3), Job("A", 0, 2)]
    states = [_finished(jobs[1], 1, 2, 0), _finished(jobs[0], 0, 6, 5)]
    report = compute_metrics(jobs, states)
    assert [m.id for m in report.per_job] == ["Z", "A"]
    assert report.per_job[0].to_dict()["priority"] == 3
    assert "priority" not in report.per_job[1].to_dict()


def test_system_metrics_with_idle_time():
    res = schedule_fcfs([Job("P1", 2, 3), Job("P2", 10, 2)])
    system = res.system
    assert system.makespan == 12
    assert system.cpu_busy_time == 5
    assert system.idle_time == 7
    assert system.cpu_utilization == pytest.approx(5 / 12)
    assert system.throughput == pytest.approx(2 / 12)
    assert system.avg_response_time == 0


def test_system_metrics_starvation_count():
    balanced = schedule_fcfs([Job("P1", 0, 10), Job("P2", 0, 1), Job("P3", 0, 1)])
    # Waits 0, 10, 11 against an average of 7.
    assert balanced.system.starvation_count == 0

    jobs = [Job(f"P{i}", 0, 1) for i in range(1, 5)] + [Job("P5", 0, 10), Job("P6", 0, 1)]
    skewed = schedule_fcfs(jobs)
    # Waits 0, 1, 2, 3, 4, 14 against an average of 4.
    assert skewed.system.starvation_count == 1


def test_system_metrics_empty_timeline():
    res = ScheduleResult(algorithm="FCFS", quantum=None)
    system = compute_system_metrics(res)
    assert res.system is system
    assert (system.makespan, system.cpu_busy_time, system.throughput) == (0, 0, 0.0)
