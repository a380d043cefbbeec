from .saving import (
    FileStorage,
    scenario_to_bytes,
    scenario_from_bytes,
    write_scenario,
    read_scenario,
    write_location_list,
    write_times,
    write_properties,
    format_properties,
)

__all__ = [
    "FileStorage",
    "scenario_to_bytes",
    "scenario_from_bytes",
    "write_scenario",
    "read_scenario",
    "write_location_list",
    "write_times",
    "write_properties",
    "format_properties",
]
