from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from ..utils.timing import ms_from_distance

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

MINUTE = 60 * 1000
HOUR = 60 * MINUTE


class Config:
    def __init__(self, config_path: Optional[str] = None):
        config_path = config_path or DEFAULT_CONFIG_PATH
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} does not contain a mapping.")
        self.path = config_path
        self.data = data

    def yaml_to_dict(self, data: dict) -> dict:
        config_dict = {}
        for key, value in data.items():
            if isinstance(value, dict):
                config_dict[key] = self.yaml_to_dict(value)
            else:
                config_dict[key] = value
        return config_dict

    def setup_env_parameters(self) -> dict:
        """Recursive YAML -> Python dict."""
        return self.yaml_to_dict(self.data)

    def to_generator_config(self) -> "GeneratorConfig":
        return GeneratorConfig.from_dict(self.setup_env_parameters())


@dataclass(frozen=True)
class FamilyConfig:
    """Arrival family together with the dynamism bins it has to fill."""
    name: str
    dyn_lb: float
    dyn_ub: float
    num_levels: int

    def levels(self, step: float) -> Tuple[float, ...]:
        """Canonical dynamism levels (multiples of ``step``) inside [dyn_lb, dyn_ub]."""
        k_lo = math.ceil(round(self.dyn_lb / step, 9))
        k_hi = math.floor(round(self.dyn_ub / step, 9))
        return tuple(round(k * step, 10) for k in range(k_lo, k_hi + 1))


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Every tunable of a dataset run. Times are integer milliseconds,
    distances kilometres, speeds km/h.
    """
    # scenario
    scenario_length: int = 12 * HOUR
    num_orders: int = 360
    num_vehicles: int = 10
    vehicle_speed: float = 50.0
    vehicle_capacity: int = 1
    area_width: float = 10.0
    pickup_duration: int = 5 * MINUTE
    delivery_duration: int = 5 * MINUTE

    # time windows
    min_pickup_length: int = 10 * MINUTE
    min_delivery_length: int = 10 * MINUTE

    # arrival time series
    intensity_period: int = HOUR
    sine_height_range: Tuple[float, float] = (-0.99, 3.0)
    normal_sd: float = 2.4 * MINUTE
    uniform_max_deviation_mean: float = 1.0 * MINUTE
    uniform_max_deviation_sd: float = 1.0 * MINUTE
    uniform_max_deviation_upper: float = 15.0 * MINUTE
    max_series_draws: Optional[int] = None

    # sampling
    urgency_levels: Tuple[int, ...] = (0, 5, 10, 15, 20, 25, 30, 35, 40, 45)
    families: Tuple[FamilyConfig, ...] = field(default_factory=lambda: (
        FamilyConfig("sine", 0.0, 0.46, 10),
        FamilyConfig("homogeneous", 0.49, 0.56, 2),
        FamilyConfig("normal", 0.59, 0.66, 2),
        FamilyConfig("uniform", 0.69, 1.0, 7),
    ))
    target_num_instances: int = 50
    dyn_step: float = 0.05
    dyn_bandwidth: float = 0.01
    urgency_tolerance: float = 0.01
    max_attempts: Optional[int] = None

    # run
    rng_seed: int = 123
    dataset_dir: str = "files/dataset/"
    location_mode: str = "distinct"

    def __post_init__(self):
        if self.num_orders < 2:
            raise ValueError("num_orders must be at least 2 to measure dynamism.")
        if self.target_num_instances < 1:
            raise ValueError("target_num_instances must be positive.")
        if not 0 < self.dyn_bandwidth <= self.dyn_step / 2:
            raise ValueError("dyn_bandwidth must lie in (0, dyn_step / 2].")
        if self.location_mode not in ("distinct", "fixed"):
            raise ValueError(f"Unknown location_mode: {self.location_mode}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be positive or None.")
        for fam in self.families:
            levels = fam.levels(self.dyn_step)
            if len(levels) != fam.num_levels:
                raise ValueError(
                    f"Family '{fam.name}': range [{fam.dyn_lb}, {fam.dyn_ub}] holds "
                    f"{len(levels)} dynamism levels, config says {fam.num_levels}."
                )

    # ---- derived travel-time bounds on the square area ----
    def travel_time(self, distance: float) -> int:
        return ms_from_distance(distance, self.vehicle_speed)

    @property
    def diagonal(self) -> float:
        return math.sqrt(2.0) * self.area_width

    @property
    def half_diagonal_tt(self) -> int:
        return self.travel_time(0.5 * self.diagonal)

    @property
    def one_and_half_diagonal_tt(self) -> int:
        return self.travel_time(1.5 * self.diagonal)

    @property
    def two_diagonal_tt(self) -> int:
        return self.travel_time(2.0 * self.diagonal)

    def office_hours_length(self, urgency: int) -> int:
        """
        Length of [0, office hours) in which orders may be announced, such that
        an order announced at the last moment can still be served and the
        vehicle can return to the depot before the horizon ends.
        """
        service = self.pickup_duration + self.delivery_duration
        if urgency < self.half_diagonal_tt:
            return self.scenario_length - self.two_diagonal_tt - service
        return self.scenario_length - urgency - self.one_and_half_diagonal_tt - service

    def replace(self, **changes: Any) -> "GeneratorConfig":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorConfig":
        """Build from the nested layout of ``configs/config.yaml``."""
        kwargs: Dict[str, Any] = {}
        scen = data.get("scenario", {}) or {}
        if "length_hours" in scen:
            kwargs["scenario_length"] = int(round(float(scen["length_hours"]) * HOUR))
        for key in ("num_orders", "num_vehicles", "vehicle_capacity"):
            if key in scen:
                kwargs[key] = int(scen[key])
        if "vehicle_speed_kmh" in scen:
            kwargs["vehicle_speed"] = float(scen["vehicle_speed_kmh"])
        if "area_width" in scen:
            kwargs["area_width"] = float(scen["area_width"])
        for key in ("pickup_duration", "delivery_duration"):
            if key in scen:
                kwargs[key] = int(scen[key])

        tw = data.get("time_windows", {}) or {}
        for key in ("min_pickup_length", "min_delivery_length"):
            if key in tw:
                kwargs[key] = int(tw[key])

        ts = data.get("time_series", {}) or {}
        if "intensity_period" in ts:
            kwargs["intensity_period"] = int(ts["intensity_period"])
        if "sine_height_range" in ts:
            lo, hi = ts["sine_height_range"]
            kwargs["sine_height_range"] = (float(lo), float(hi))
        if "normal_sd" in ts:
            kwargs["normal_sd"] = float(ts["normal_sd"])
        max_dev = ts.get("uniform_max_deviation", {}) or {}
        for key in ("mean", "sd", "upper"):
            if key in max_dev:
                kwargs[f"uniform_max_deviation_{key}"] = float(max_dev[key])
        if "max_series_draws" in ts:
            kwargs["max_series_draws"] = _optional_int(ts["max_series_draws"])

        smp = data.get("sampling", {}) or {}
        if "urgency_levels" in smp:
            kwargs["urgency_levels"] = tuple(int(u) for u in smp["urgency_levels"])
        if "families" in smp:
            kwargs["families"] = tuple(_family_from_dict(f) for f in smp["families"])
        if "target_num_instances" in smp:
            kwargs["target_num_instances"] = int(smp["target_num_instances"])
        for key in ("dyn_step", "dyn_bandwidth", "urgency_tolerance"):
            if key in smp:
                kwargs[key] = float(smp[key])
        if "max_attempts" in smp:
            kwargs["max_attempts"] = _optional_int(smp["max_attempts"])

        if "rng_seed" in data:
            kwargs["rng_seed"] = int(data["rng_seed"])
        for key in ("dataset_dir", "location_mode"):
            if key in data:
                kwargs[key] = str(data[key])
        return cls(**kwargs)


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def _family_from_dict(raw: Dict[str, Any]) -> FamilyConfig:
    try:
        lb, ub = raw["dynamism_range"]
        return FamilyConfig(str(raw["name"]), float(lb), float(ub), int(raw["num_levels"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed family entry: {raw}") from e


def load_generator_config(config_path: Optional[str] = None) -> GeneratorConfig:
    return Config(config_path).to_generator_config()
