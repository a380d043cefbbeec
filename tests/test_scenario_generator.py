# tests/test_scenario_generator.py
from __future__ import annotations

import pytest

from dynurg_gen.configs.load_config import MINUTE
from dynurg_gen.data.scenario import EventType
from dynurg_gen.policies.location import FixedLocations, LocationPolicies, UniformLocations
from dynurg_gen.policies.time_series import TimeSeriesPolicies
from dynurg_gen.scenario_generator import ScenarioGenerator
from dynurg_gen.utils.metrics import check_time_window_strictness, get_event_type_counts, measure_urgency


def build(config, urgency_min=20, seed=11):
    urgency = urgency_min * MINUTE
    office = config.office_hours_length(urgency)
    series = TimeSeriesPolicies.from_config("uniform", config, office)
    locations = LocationPolicies.from_config(config, seed)
    return ScenarioGenerator(config, urgency, series, locations, properties={"time_series": "uniform"})


def test_candidate_layout(small_config):
    scenario = build(small_config).generate(3)

    assert get_event_type_counts(scenario) == {
        "AddDepotEvent": 1,
        "AddVehicleEvent": 2,
        "AddParcelEvent": 20,
        "TimeOutEvent": 1,
    }
    times = [e.time for e in scenario.events]
    assert times == sorted(times)
    assert scenario.events[0].event_type is EventType.ADD_DEPOT
    assert scenario.events[0].time == -1
    assert scenario.events[-1].event_type is EventType.TIME_OUT
    assert scenario.events[-1].time == small_config.scenario_length
    assert scenario.depots[0].position == (5.0, 5.0)
    assert all(v.start_position == (5.0, 5.0) for v in scenario.vehicles)
    assert scenario.problem_class == "temp"


def test_candidate_meets_urgency_and_strictness(small_config):
    scenario = build(small_config, urgency_min=20).generate(8)
    check_time_window_strictness(scenario)
    summary = measure_urgency(scenario)
    assert summary.mean == 20 * MINUTE
    assert summary.sd == 0.0


def test_same_seed_same_candidate(small_config):
    generator = build(small_config)
    assert generator.generate(42) == generator.generate(42)
    assert generator.generate(42) != generator.generate(43)


def test_location_modes(small_config):
    assert isinstance(LocationPolicies.from_config(small_config, 1), UniformLocations)
    fixed = LocationPolicies.from_config(small_config.replace(location_mode="fixed"), 1)
    assert isinstance(fixed, FixedLocations)
    assert (fixed.generate(1, 40) == fixed.generate(2, 40)).all()
    with pytest.raises(ValueError):
        fixed.generate(0, 41)
