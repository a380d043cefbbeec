# tests/test_saving.py
from __future__ import annotations

import pytest

from dynurg_gen.configs.load_config import MINUTE
from dynurg_gen.errors import DatasetIOError, ScenarioFormatError
from dynurg_gen.io.saving import (
    FileStorage,
    format_properties,
    read_scenario,
    scenario_from_bytes,
    write_location_list,
    write_properties,
    write_scenario,
    write_times,
)

from conftest import make_parcel, make_scenario


@pytest.fixture
def scenario():
    return make_scenario([
        make_parcel(0, (0, 10 * MINUTE), (20 * MINUTE, 60 * MINUTE), pickup=(1.5, 2.25), delivery=(7.0, 3.0)),
        make_parcel(3 * MINUTE, (3 * MINUTE, 13 * MINUTE), (30 * MINUTE, 90 * MINUTE)),
    ], num_vehicles=2).with_ids("10-0.50", "#3")


def test_properties_format():
    text = format_properties({"problem_class": "0-0.45", "id": "#0", "dynamism": 0.4512, "AddDepotEvent": 1})
    assert text == "problem_class = 0-0.45\nid = #0\ndynamism = 0.4512\nAddDepotEvent = 1"


def test_write_properties_has_no_trailing_newline(tmp_path):
    path = write_properties({"a": 1, "b": "x"}, str(tmp_path / "inst.properties"))
    assert (tmp_path / "inst.properties").read_text() == "a = 1\nb = x"
    assert path.endswith(".properties")


def test_times_file(tmp_path):
    write_times(43_200_000, [0, 15, 1_000], str(tmp_path / "inst.times"))
    assert (tmp_path / "inst.times").read_text() == "43200000\n0\n15\n1000\n"


def test_points_file(tmp_path):
    write_location_list([(5.0, 5.0), (1.5, 2.25)], str(tmp_path / "inst.points"))
    assert (tmp_path / "inst.points").read_text().splitlines() == ["5.0 5.0", "1.5 2.25"]


def test_scenario_file_reads_back(tmp_path, scenario):
    path = str(tmp_path / "10-0.50#3.scen")
    write_scenario(scenario, path)
    loaded = read_scenario(path)
    assert loaded == scenario
    assert loaded.problem_class == "10-0.50"
    assert loaded.instance_id == "#3"
    assert len(loaded.parcels) == 2


@pytest.mark.parametrize("data", [
    b"not json",
    b'{"events": []}',
    b'{"problem_class": "x", "instance_id": "", "time_window": [5, 1], "events": []}',
    b'{"problem_class": "x", "instance_id": "", "time_window": [0, 1], "events": [{"type": "Bogus", "time": 0}]}',
])
def test_malformed_scenario(data):
    with pytest.raises(ScenarioFormatError):
        scenario_from_bytes(data)


def test_storage_errors_are_wrapped(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    storage = FileStorage()
    with pytest.raises(DatasetIOError):
        storage.create_directories(str(blocker / "sub"))
    with pytest.raises(DatasetIOError):
        storage.write(str(tmp_path / "missing" / "file.scen"), b"{}")
    with pytest.raises(DatasetIOError):
        read_scenario(str(tmp_path / "nothing.scen"))
