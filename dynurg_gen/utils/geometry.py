# dynurg_gen/utils/geometry.py
from __future__ import annotations
from typing import Sequence, Tuple
import numpy as np

Rect = Tuple[Tuple[float, float], Tuple[float, float]]  # ((xmin, xmax), (ymin, ymax)), km


def euclidean(a, b) -> float:
    """Distance in km between two (2,) points."""
    return float(np.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1])))


def nearest_distance(p, centers: Sequence) -> float:
    """Distance from p to the closest of `centers` (K,2)."""
    centers = np.asarray(centers, dtype=float).reshape(-1, 2)
    if centers.shape[0] == 0:
        raise ValueError("nearest_distance needs at least one center.")
    return float(np.min(np.linalg.norm(centers - np.asarray(p, dtype=float)[None, :], axis=1)))


def square_area(width: float) -> Rect:
    """The service area [0, width] x [0, width]."""
    return ((0.0, float(width)), (0.0, float(width)))


def area_center(rect: Rect) -> Tuple[float, float]:
    (xmin, xmax), (ymin, ymax) = rect
    return ((xmin + xmax) / 2.0, (ymin + ymax) / 2.0)


def sample_uniform_rect(rng: np.random.Generator, rect: Rect, n: int) -> np.ndarray:
    """n points drawn uniformly from rect as an (n,2) array, x and y interleaved per point."""
    (xmin, xmax), (ymin, ymax) = rect
    return rng.uniform((xmin, ymin), (xmax, ymax), size=(n, 2))
