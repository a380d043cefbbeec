# dynurg_gen/scenario_generator.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional
import numpy as np

from .data.scenario import (
    Depot, EventType, Parcel, Scenario, ScenarioEvent, TimeWindow, Vehicle, sort_events,
)
from .policies.time_window import assign_time_windows
from .utils.geometry import area_center, square_area
from .utils.seeding import next_seed
from .utils.timing import TravelTimes

logger = logging.getLogger(__name__)


class ScenarioGenerator:
    """
    Assembles one candidate scenario per seed: announce times from the time
    series, two locations per order, per-parcel time windows for the given
    urgency, a single depot in the centre of the area and a homogeneous fleet
    starting there.
    """

    def __init__(self, config, urgency: int, time_series, locations, properties: Optional[Dict[str, str]] = None):
        self.config = config
        self.urgency = int(urgency)
        self.time_series = time_series
        self.locations = locations
        self.properties = dict(properties or {})

        self.length = int(config.scenario_length)
        self.depot_position = area_center(square_area(config.area_width))
        self.travel_times = TravelTimes([self.depot_position], config.vehicle_speed)

    def _static_events(self) -> List[ScenarioEvent]:
        cfg = self.config
        depot_pos = tuple(float(v) for v in self.depot_position)
        events = [ScenarioEvent(-1, EventType.ADD_DEPOT, depot=Depot(depot_pos))]
        vehicle = Vehicle(
            start_position=depot_pos,
            speed=float(cfg.vehicle_speed),
            capacity=int(cfg.vehicle_capacity),
            availability=TimeWindow(0, self.length),
        )
        events.extend(ScenarioEvent(-1, EventType.ADD_VEHICLE, vehicle=vehicle) for _ in range(cfg.num_vehicles))
        return events

    def generate(self, seed: int) -> Scenario:
        cfg = self.config
        rng = np.random.default_rng(seed)
        announce_times = self.time_series.generate(next_seed(rng))
        locations = self.locations.generate(next_seed(rng), 2 * len(announce_times))

        events = self._static_events()
        collapsed = 0
        for i, t in enumerate(announce_times):
            pickup = (float(locations[2 * i, 0]), float(locations[2 * i, 1]))
            delivery = (float(locations[2 * i + 1, 0]), float(locations[2 * i + 1, 1]))
            windows = assign_time_windows(
                next_seed(rng), t, pickup, delivery, self.travel_times,
                end_time=self.length,
                urgency=self.urgency,
                pickup_duration=cfg.pickup_duration,
                delivery_duration=cfg.delivery_duration,
                min_pickup_length=cfg.min_pickup_length,
                min_delivery_length=cfg.min_delivery_length,
            )
            collapsed += windows.collapsed
            parcel = Parcel(
                announce_time=t,
                pickup_location=pickup,
                delivery_location=delivery,
                pickup_duration=cfg.pickup_duration,
                delivery_duration=cfg.delivery_duration,
                pickup_window=windows.pickup,
                delivery_window=windows.delivery,
            )
            events.append(ScenarioEvent(t, EventType.ADD_PARCEL, parcel=parcel))
        events.append(ScenarioEvent(self.length, EventType.TIME_OUT))

        if collapsed:
            logger.debug("%d of %d parcels have a collapsed delivery window", collapsed, len(announce_times))
        return Scenario(
            events=sort_events(events),
            time_window=TimeWindow(0, self.length),
            properties=self.properties,
        )
