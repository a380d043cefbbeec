# tests/conftest.py
from __future__ import annotations

from datetime import datetime

import pytest

from dynurg_gen.configs.load_config import MINUTE, FamilyConfig, GeneratorConfig
from dynurg_gen.data.scenario import (
    Depot, EventType, Parcel, Scenario, ScenarioEvent, TimeWindow, Vehicle, sort_events,
)
from dynurg_gen.utils.timing import TravelTimes

HORIZON = 12 * 60 * MINUTE
CENTER = (5.0, 5.0)


@pytest.fixture
def travel_times() -> TravelTimes:
    return TravelTimes([CENTER], 50.0)


@pytest.fixture
def small_config(tmp_path) -> GeneratorConfig:
    """
    20 orders, evenly spaced announce times without jitter: every candidate
    has dynamism ~1.0 and lands in the single bin of the 'uniform' family.
    """
    return GeneratorConfig(
        num_orders=20,
        num_vehicles=2,
        uniform_max_deviation_mean=0.0,
        uniform_max_deviation_sd=0.0,
        uniform_max_deviation_upper=0.0,
        urgency_levels=(0, 20),
        families=(FamilyConfig("uniform", 0.99, 1.0, 1),),
        target_num_instances=2,
        max_attempts=50,
        dataset_dir=str(tmp_path / "dataset"),
    )


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 1, 9, 30, 0)


def make_parcel(announce, pickup_tw, delivery_tw, pickup=CENTER, delivery=CENTER,
                duration=5 * MINUTE) -> Parcel:
    return Parcel(
        announce_time=announce,
        pickup_location=pickup,
        delivery_location=delivery,
        pickup_duration=duration,
        delivery_duration=duration,
        pickup_window=TimeWindow(*pickup_tw),
        delivery_window=TimeWindow(*delivery_tw),
    )


def make_scenario(parcels, num_vehicles=1) -> Scenario:
    events = [ScenarioEvent(-1, EventType.ADD_DEPOT, depot=Depot(CENTER))]
    vehicle = Vehicle(CENTER, 50.0, 1, TimeWindow(0, HORIZON))
    events += [ScenarioEvent(-1, EventType.ADD_VEHICLE, vehicle=vehicle) for _ in range(num_vehicles)]
    events += [ScenarioEvent(p.announce_time, EventType.ADD_PARCEL, parcel=p) for p in parcels]
    events.append(ScenarioEvent(HORIZON, EventType.TIME_OUT))
    return Scenario(sort_events(events), TimeWindow(0, HORIZON), properties={"time_series": "uniform"})
