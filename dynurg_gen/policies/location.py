# dynurg_gen/policies/location.py
from __future__ import annotations
from typing import Protocol
import numpy as np

from ..utils.geometry import Rect, sample_uniform_rect, square_area


class LocationGenerator(Protocol):
    NAME: str

    def generate(self, seed: int, count: int) -> np.ndarray:
        """Returns (count, 2) float array of coordinates."""
        ...


class UniformLocations:
    NAME = "uniform"

    def __init__(self, area: Rect):
        self.area = area

    def generate(self, seed: int, count: int) -> np.ndarray:
        return sample_uniform_rect(np.random.default_rng(seed), self.area, n=count)


class FixedLocations:
    """Always hands out (a prefix of) the same location list; the seed is ignored."""
    NAME = "fixed"

    def __init__(self, locations):
        self.locations = np.asarray(locations, dtype=float).reshape(-1, 2)

    def generate(self, seed: int, count: int) -> np.ndarray:
        if count > self.locations.shape[0]:
            raise ValueError(
                f"Fixed location list holds {self.locations.shape[0]} points, {count} requested."
            )
        return self.locations[:count].copy()


class LocationPolicies:
    REGISTRY = {
        "distinct": UniformLocations,
        "fixed": FixedLocations,
    }

    @classmethod
    def from_config(cls, config, seed: int) -> LocationGenerator:
        """
        'distinct': fresh uniform locations for every scenario.
        'fixed': one uniform list of 2 * num_orders points drawn from `seed`,
        shared by every scenario of the run.
        """
        area = square_area(config.area_width)
        if config.location_mode == "distinct":
            return UniformLocations(area)
        if config.location_mode == "fixed":
            points = UniformLocations(area).generate(seed, 2 * config.num_orders)
            return FixedLocations(points)
        raise ValueError(f"Unknown location_mode: {config.location_mode}")
