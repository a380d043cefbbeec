# dynurg_gen/utils/metrics.py
from __future__ import annotations
from collections import Counter
from typing import Dict, Iterable, List, NamedTuple, Tuple
import numpy as np

from ..data.scenario import EventType, Scenario
from ..errors import TimeWindowStrictnessError
from .timing import TravelTimes


class UrgencySummary(NamedTuple):
    count: int
    mean: float
    sd: float
    min: float
    max: float


def _travel_times(scenario: Scenario) -> TravelTimes:
    depots = [d.position for d in scenario.depots]
    vehicles = scenario.vehicles
    if not depots or not vehicles:
        raise ValueError("Scenario needs at least one depot and one vehicle.")
    return TravelTimes(depots, vehicles[0].speed)


def check_time_window_strictness(scenario: Scenario) -> None:
    """
    Checks for every parcel that its windows can be honoured:
    the pickup deadline is not before the announcement, the delivery window
    does not open before the earliest possible arrival from the pickup, and it
    does not close before a vehicle that picks up at the deadline can arrive.
    """
    tt = _travel_times(scenario)
    for i, p in enumerate(scenario.parcels):
        if p.pickup_window.end < p.announce_time:
            raise TimeWindowStrictnessError(
                f"parcel {i}: pickup deadline {p.pickup_window.end} before announcement {p.announce_time}"
            )
        travel = tt.shortest_travel_time(p.pickup_location, p.delivery_location)
        first_departure = p.pickup_window.begin + p.pickup_duration
        if p.delivery_window.begin < first_departure + travel:
            raise TimeWindowStrictnessError(
                f"parcel {i}: delivery opens at {p.delivery_window.begin}, "
                f"earliest arrival is {first_departure + travel}"
            )
        latest_departure = p.pickup_window.end + p.pickup_duration
        if p.delivery_window.end < latest_departure + travel:
            raise TimeWindowStrictnessError(
                f"parcel {i}: delivery closes at {p.delivery_window.end}, "
                f"latest arrival is {latest_departure + travel}"
            )


def measure_urgency(scenario: Scenario) -> UrgencySummary:
    """Summary of (pickup deadline - announce time) over all parcels."""
    urgencies = np.array(
        [p.pickup_window.end - p.announce_time for p in scenario.parcels], dtype=float
    )
    if urgencies.size == 0:
        raise ValueError("Scenario has no parcels.")
    sd = float(np.std(urgencies, ddof=1)) if urgencies.size > 1 else 0.0
    return UrgencySummary(
        int(urgencies.size), float(np.mean(urgencies)), sd, float(urgencies.min()), float(urgencies.max())
    )


def measure_dynamism(arrival_times: Iterable[float], length_of_day: float) -> float:
    """
    Degree of dynamism of a set of order arrival times in [0, length_of_day).

    1.0 means orders arrive at perfectly regular intervals of
    length_of_day / n; bursts of arrivals closer than that lower the value.
    Each too-short gap contributes its shortfall plus a scaled carry-over of
    the previous shortfall, normalised by the worst case (all arrivals at once).
    """
    times = sorted(float(t) for t in arrival_times)
    n = len(times)
    if n < 2:
        raise ValueError("At least two arrival times are needed to measure dynamism.")
    if times[0] < 0 or times[-1] >= length_of_day:
        raise ValueError(f"Arrival times must lie in [0, {length_of_day}).")

    theta = length_of_day / n
    sum_dev = 0.0
    max_dev = (n - 1) * theta
    prev_dev = 0.0
    for i in range(n - 1):
        delta = times[i + 1] - times[i]
        if delta < theta:
            diff = theta - delta
            scaled_prev = diff / theta * prev_dev
            err = diff + scaled_prev
            sum_dev += err
            max_dev += scaled_prev
            prev_dev = err
        else:
            prev_dev = 0.0
    return 1.0 - sum_dev / max_dev


def get_event_type_counts(scenario: Scenario) -> Dict[str, int]:
    """Event type name -> count, in order of first appearance."""
    return dict(Counter(e.event_type.value for e in scenario.events))


def count_parcels(scenario: Scenario) -> int:
    return sum(1 for e in scenario.events if e.event_type is EventType.ADD_PARCEL)


def get_service_points(scenario: Scenario) -> List[Tuple[float, float]]:
    """Depot positions and pickup/delivery locations in event order."""
    points: List[Tuple[float, float]] = []
    for e in scenario.events:
        if e.event_type is EventType.ADD_DEPOT:
            points.append(e.depot.position)
        elif e.event_type is EventType.ADD_PARCEL:
            points.append(e.parcel.pickup_location)
            points.append(e.parcel.delivery_location)
    return points


def get_arrival_times(scenario: Scenario) -> List[int]:
    return [p.announce_time for p in scenario.parcels]
