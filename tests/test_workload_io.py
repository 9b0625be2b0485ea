import csv
from pathlib import Path

import pytest

from schedsim.workload_io import job_from_mapping, load_workload
from schedsim.models import Job


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"id":"B","arrival_time":1,"burst_time":2}]')
    jobs = load_workload(p)
    assert isinstance(jobs[0], Job)
    assert jobs[0].priority == 1
    assert jobs[1].priority is None
    assert jobs[1].arrival_time == 1


def test_load_json_accepts_pid_and_camel_case(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid": 7, "arrivalTime": 2, "burstTime": 4}]')
    assert load_workload(p) == [Job("7", 2, 4)]


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    jobs = load_workload(p)
    assert jobs[0].id == "A"
    assert jobs[0].burst_time == 3
    assert jobs[1].priority is None


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("A 0 3")
    with pytest.raises(ValueError, match="Unsupported"):
        load_workload(p)


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"id": "A", "arrival_time": 0, "burst_time": 3}')
    with pytest.raises(ValueError, match="list"):
        load_workload(p)


def test_max_jobs(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,arrival_time,burst_time\nA,0,1\nB,0,1\nC,0,1\n")
    assert len(load_workload(p, max_jobs=3)) == 3
    with pytest.raises(ValueError, match="at most 2"):
        load_workload(p, max_jobs=2)


@pytest.mark.parametrize(
    "entry",
    [
        {"arrival_time": 0, "burst_time": 3},
        {"id": "A", "arrival_time": "soon", "burst_time": 3},
        {"id": "A", "arrival_time": 0},
        {"id": " ", "arrival_time": 0, "burst_time": 3},
        {"id": "A", "arrival_time": 0, "burst_time": 3, "priority": "high"},
    ],
)
def test_invalid_entries(entry):
    with pytest.raises(ValueError, match="Invalid job entry"):
        job_from_mapping(entry)


@pytest.mark.parametrize(
    "entry",
    [
        {"id": "A", "arrival_time": 0.9, "burst_time": 3},
        {"id": "A", "arrival_time": 0, "burst_time": 2.7},
        {"id": "A", "arrival_time": 0, "burst_time": 3, "priority": 1.5},
        {"id": "A", "arrival_time": True, "burst_time": 3},
        {"id": "A", "arrival_time": 0, "burst_time": "2.5"},
        {"id": "A", "arrival_time": 0, "burst_time": [3]},
    ],
)
def test_non_integer_values_rejected(entry):
    with pytest.raises(ValueError, match="Invalid job entry"):
        job_from_mapping(entry)


def test_fractional_csv_cell_rejected(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("id,arrival_time,burst_time\nA,0,2.5\n")
    with pytest.raises(ValueError, match="Invalid job entry"):
        load_workload(p)


@pytest.fixture
def small_csv_fields():
    previous = csv.field_size_limit(16)
    yield
    csv.field_size_limit(previous)


def test_malformed_csv_is_a_value_error(tmp_path: Path, small_csv_fields):
    p = tmp_path / "w.csv"
    p.write_text("id,arrival_time,burst_time\n" + "A" * 64 + ",0,3\n")
    with pytest.raises(ValueError, match="Malformed CSV workload at line 2"):
        load_workload(p)
