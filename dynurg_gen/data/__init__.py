from .scenario import (
    Point,
    TimeWindow,
    Parcel,
    Depot,
    Vehicle,
    EventType,
    ScenarioEvent,
    Scenario,
    sort_events,
)

__all__ = [
    "Point",
    "TimeWindow",
    "Parcel",
    "Depot",
    "Vehicle",
    "EventType",
    "ScenarioEvent",
    "Scenario",
    "sort_events",
]
