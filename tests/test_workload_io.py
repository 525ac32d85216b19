from pathlib import Path

import pytest

from schedsim.models import Process
from schedsim.workload_io import load_workload, parse_number, processes_from_records


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"pid":"B","arrival_time":1.5,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority is None
    assert procs[1].arrival_time == 1.5


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2.5,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[0].burst_time == 3
    assert isinstance(procs[0].burst_time, int)
    assert procs[1].burst_time == 2.5
    assert procs[1].priority is None


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("A 0 3")
    with pytest.raises(ValueError):
        load_workload(p)


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"pid": "A", "arrival_time": 0, "burst_time": 3}')
    with pytest.raises(ValueError):
        load_workload(p)


def test_malformed_records():
    with pytest.raises(ValueError):
        processes_from_records([{"pid": "A", "arrival_time": 0}])
    with pytest.raises(ValueError):
        processes_from_records([{"pid": "A", "arrival_time": "soon", "burst_time": 3}])
    with pytest.raises(ValueError):
        processes_from_records([{"pid": "A", "arrival_time": 0, "burst_time": 3, "priority": "x"}])


def test_parse_number():
    assert parse_number("4") == 4
    assert isinstance(parse_number("4.0"), int)
    assert parse_number(" 0.25 ") == 0.25
    with pytest.raises(ValueError):
        parse_number(True)


def test_real_valued_priority_is_kept():
    procs = processes_from_records(
        [{"pid": "A", "arrival_time": 0, "burst_time": 3, "priority": 2.5},
         {"pid": "B", "arrival_time": 0, "burst_time": 3, "priority": "1"}]
    )
    assert procs[0].priority == 2.5
    assert procs[1].priority == 1
