"""Immutable scenario records: time windows, parcels, timed events.

A scenario is an ordered list of timed events over the horizon
``[0, length)``. Depots and vehicles are added before the start (time ``-1``),
parcels at their announce time, and a time-out event closes the horizon.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

Point = Tuple[float, float]


def _point(p) -> Point:
    x, y = p
    return (float(x), float(y))


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [begin, end) in milliseconds."""
    begin: int
    end: int

    def __post_init__(self):
        if self.begin > self.end:
            raise ValueError(f"Time window begin ({self.begin}) must be <= end ({self.end}).")

    @property
    def length(self) -> int:
        return self.end - self.begin

    def to_list(self) -> List[int]:
        return [self.begin, self.end]

    def __repr__(self) -> str:
        return f"TimeWindow({self.begin}, {self.end})"


@dataclass(frozen=True)
class Parcel:
    announce_time: int
    pickup_location: Point
    delivery_location: Point
    pickup_duration: int
    delivery_duration: int
    pickup_window: TimeWindow
    delivery_window: TimeWindow
    needed_capacity: int = 0


@dataclass(frozen=True)
class Depot:
    position: Point


@dataclass(frozen=True)
class Vehicle:
    start_position: Point
    speed: float
    capacity: int
    availability: TimeWindow


class EventType(Enum):
    """Event kinds; the value is the name written to metadata files."""
    ADD_DEPOT = "AddDepotEvent"
    ADD_VEHICLE = "AddVehicleEvent"
    ADD_PARCEL = "AddParcelEvent"
    TIME_OUT = "TimeOutEvent"


@dataclass(frozen=True)
class ScenarioEvent:
    time: int
    event_type: EventType
    depot: Optional[Depot] = None
    vehicle: Optional[Vehicle] = None
    parcel: Optional[Parcel] = None

    def __repr__(self) -> str:
        return f"ScenarioEvent(t={self.time}, type={self.event_type.value})"


_EVENT_ORDER = {
    EventType.ADD_DEPOT: 0,
    EventType.ADD_VEHICLE: 1,
    EventType.ADD_PARCEL: 2,
    EventType.TIME_OUT: 3,
}


def sort_events(events) -> Tuple[ScenarioEvent, ...]:
    """Stable sort on time; ties keep depots before vehicles before parcels."""
    return tuple(sorted(events, key=lambda e: (e.time, _EVENT_ORDER[e.event_type])))


@dataclass(frozen=True)
class Scenario:
    """A fully assembled problem instance.

    Attributes:
        events: Timed events sorted by time
        time_window: Scenario horizon [0, length)
        problem_class: Problem class id ("temp" until accepted)
        instance_id: Instance id within the problem class
        properties: Generation parameters, insertion ordered
    """
    events: Tuple[ScenarioEvent, ...]
    time_window: TimeWindow
    problem_class: str = "temp"
    instance_id: str = ""
    properties: Mapping[str, str] = field(default_factory=dict)

    @property
    def parcels(self) -> List[Parcel]:
        return [e.parcel for e in self.events if e.event_type is EventType.ADD_PARCEL]

    @property
    def depots(self) -> List[Depot]:
        return [e.depot for e in self.events if e.event_type is EventType.ADD_DEPOT]

    @property
    def vehicles(self) -> List[Vehicle]:
        return [e.vehicle for e in self.events if e.event_type is EventType.ADD_VEHICLE]

    def with_ids(self, problem_class: str, instance_id: str) -> "Scenario":
        return replace(self, problem_class=problem_class, instance_id=instance_id)

    # ---- plain-dict form used by the .scen serializer ----
    def to_dict(self) -> Dict[str, Any]:
        return {
            "problem_class": self.problem_class,
            "instance_id": self.instance_id,
            "time_window": self.time_window.to_list(),
            "properties": dict(self.properties),
            "events": [_event_to_dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        """Inverse of to_dict. Raises KeyError/TypeError/ValueError on bad input."""
        begin, end = data["time_window"]
        return cls(
            events=tuple(_event_from_dict(e) for e in data["events"]),
            time_window=TimeWindow(int(begin), int(end)),
            problem_class=str(data["problem_class"]),
            instance_id=str(data["instance_id"]),
            properties={str(k): str(v) for k, v in dict(data.get("properties", {})).items()},
        )


def _event_to_dict(e: ScenarioEvent) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": e.event_type.value, "time": e.time}
    if e.depot is not None:
        out["position"] = list(e.depot.position)
    if e.vehicle is not None:
        v = e.vehicle
        out["start_position"] = list(v.start_position)
        out["speed"] = v.speed
        out["capacity"] = v.capacity
        out["availability"] = v.availability.to_list()
    if e.parcel is not None:
        p = e.parcel
        out["pickup_location"] = list(p.pickup_location)
        out["delivery_location"] = list(p.delivery_location)
        out["pickup_duration"] = p.pickup_duration
        out["delivery_duration"] = p.delivery_duration
        out["pickup_window"] = p.pickup_window.to_list()
        out["delivery_window"] = p.delivery_window.to_list()
        out["needed_capacity"] = p.needed_capacity
    return out


def _tw(raw) -> TimeWindow:
    begin, end = raw
    return TimeWindow(int(begin), int(end))


def _event_from_dict(d: Mapping[str, Any]) -> ScenarioEvent:
    event_type = EventType(d["type"])
    time = int(d["time"])
    if event_type is EventType.ADD_DEPOT:
        return ScenarioEvent(time, event_type, depot=Depot(_point(d["position"])))
    if event_type is EventType.ADD_VEHICLE:
        vehicle = Vehicle(
            start_position=_point(d["start_position"]),
            speed=float(d["speed"]),
            capacity=int(d["capacity"]),
            availability=_tw(d["availability"]),
        )
        return ScenarioEvent(time, event_type, vehicle=vehicle)
    if event_type is EventType.ADD_PARCEL:
        parcel = Parcel(
            announce_time=time,
            pickup_location=_point(d["pickup_location"]),
            delivery_location=_point(d["delivery_location"]),
            pickup_duration=int(d["pickup_duration"]),
            delivery_duration=int(d["delivery_duration"]),
            pickup_window=_tw(d["pickup_window"]),
            delivery_window=_tw(d["delivery_window"]),
            needed_capacity=int(d.get("needed_capacity", 0)),
        )
        return ScenarioEvent(time, event_type, parcel=parcel)
    return ScenarioEvent(time, event_type)
