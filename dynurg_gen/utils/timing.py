# dynurg_gen/utils/timing.py
from __future__ import annotations
import math
from typing import Sequence
import numpy as np

from .geometry import euclidean, nearest_distance

MS_PER_HOUR = 3_600_000


def ms_from_distance(distance: float, speed_kmh: float) -> int:
    """
    Travel time in whole milliseconds for `distance` km at `speed_kmh`.
    Rounded up to the next millisecond.
    """
    return int(math.ceil(float(distance) / float(speed_kmh) * MS_PER_HOUR))


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def round_half_down(x: float) -> int:
    return int(math.ceil(x - 0.5))


class TravelTimes:
    """Travel-time oracle on the Euclidean plane with a fixed set of depots."""

    def __init__(self, depots: Sequence, speed_kmh: float):
        self.depots = np.asarray(depots, dtype=float).reshape(-1, 2)
        if self.depots.shape[0] == 0:
            raise ValueError("TravelTimes needs at least one depot.")
        self.speed = float(speed_kmh)

    def shortest_travel_time(self, a, b) -> int:
        return ms_from_distance(euclidean(a, b), self.speed)

    def travel_time_to_nearest_depot(self, p) -> int:
        return ms_from_distance(nearest_distance(p, self.depots), self.speed)
