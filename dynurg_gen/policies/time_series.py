# dynurg_gen/policies/time_series.py
from __future__ import annotations
import math
from typing import Dict, List, Protocol
import numpy as np
from scipy.optimize import brentq
from scipy.stats import truncnorm

from ..errors import SamplingExhaustedError
from ..utils.seeding import next_seed


class TimeSeriesGenerator(Protocol):
    NAME: str

    def generate(self, seed: int) -> List[int]:
        """Sorted announce times (ms) in [0, length)."""
        ...

    def properties(self) -> Dict[str, str]:
        ...


class _BaseTimeSeries:
    NAME = ""
    LABEL = ""

    def __init__(self, length: int, num_events: int):
        if length <= 0:
            raise ValueError(f"Time series length must be positive, got {length}.")
        if num_events <= 0:
            raise ValueError(f"Expected number of events must be positive, got {num_events}.")
        self.length = int(length)
        self.num_events = int(num_events)

    def sample(self, rng: np.random.Generator) -> np.ndarray:
        raise NotImplementedError

    def generate(self, seed: int) -> List[int]:
        times = self.sample(np.random.default_rng(seed))
        times = times[(times >= 0) & (times < self.length)]
        return sorted(int(t) for t in np.floor(times))

    def properties(self) -> Dict[str, str]:
        return {"time_series": self.LABEL}


class HomogeneousPoissonSeries(_BaseTimeSeries):
    """Poisson process with constant intensity num_events / length."""
    NAME = "homogeneous"
    LABEL = "homogenous Poisson"

    @property
    def intensity(self) -> float:
        return self.num_events / self.length

    def sample(self, rng):
        n = rng.poisson(self.intensity * self.length)
        return np.sort(rng.uniform(0.0, self.length, size=n))

    def properties(self):
        out = super().properties()
        out["time_series.intensity"] = repr(self.intensity)
        return out


def _sine_positive_area(height: float) -> float:
    """Integral over one period (in radians) of max(0, sin(x) + height)."""
    if height >= 1.0:
        return 2.0 * math.pi * height
    if height <= -1.0:
        return 0.0
    return 2.0 * math.sqrt(1.0 - height * height) + height * (math.pi + 2.0 * math.asin(height))


class SinePoissonSeries(_BaseTimeSeries):
    """
    Non-homogeneous Poisson process with a sine shaped intensity
        lambda(t) = max(0, a * (sin(2*pi*(t - phase) / period) + height))
    `height` and `phase` are drawn for every series, `a` is scaled such that one
    period holds num_events / num_periods expected events. Sampled by thinning.
    """
    NAME = "sine"
    LABEL = "sine Poisson"

    def __init__(self, length, num_events, period, height_range=(-0.99, 3.0)):
        super().__init__(length, num_events)
        self.period = int(period)
        self.height_range = (float(height_range[0]), float(height_range[1]))
        if self.height_range[0] <= -1.0:
            raise ValueError("Sine intensity height must stay above -1.")

    @property
    def num_periods(self) -> float:
        return self.length / float(self.period)

    @property
    def area(self) -> float:
        return self.num_events / self.num_periods

    def amplitude(self, height: float) -> float:
        return self.area * 2.0 * math.pi / (self.period * _sine_positive_area(height))

    def intensity(self, t, height: float, phase: float):
        a = self.amplitude(height)
        vals = a * (np.sin(2.0 * math.pi * (np.asarray(t, dtype=float) - phase) / self.period) + height)
        return np.maximum(vals, 0.0)

    def sample(self, rng):
        height = rng.uniform(*self.height_range)
        phase = rng.uniform(0.0, self.period)
        lam_max = self.amplitude(height) * (1.0 + height)
        n = rng.poisson(lam_max * self.length)
        cand = np.sort(rng.uniform(0.0, self.length, size=n))
        keep = rng.random(n) * lam_max < self.intensity(cand, height, phase)
        return cand[keep]

    def properties(self):
        out = super().properties()
        out["time_series.period"] = str(self.period)
        out["time_series.num_periods"] = repr(self.num_periods)
        return out


class NormalSeries(_BaseTimeSeries):
    """
    Renewal process whose inter-arrival times follow a normal distribution
    truncated at 0. The location is chosen such that the truncated mean equals
    length / num_events.
    """
    NAME = "normal"
    LABEL = "normal"

    def __init__(self, length, num_events, sd):
        super().__init__(length, num_events)
        self.sd = float(sd)
        if self.sd <= 0:
            raise ValueError("Normal inter-arrival sd must be positive.")
        self.mean = self.length / float(self.num_events)
        self.loc = self._solve_loc()

    def _truncated_mean(self, loc: float) -> float:
        return float(truncnorm.mean(-loc / self.sd, np.inf, loc=loc, scale=self.sd))

    def _solve_loc(self) -> float:
        return float(brentq(lambda loc: self._truncated_mean(loc) - self.mean,
                            self.mean - 20.0 * self.sd, self.mean))

    def sample(self, rng):
        a = -self.loc / self.sd
        chunk = int(self.num_events * 1.25) + 16
        gaps = np.empty(0)
        total = 0.0
        while total < self.length:
            more = truncnorm.rvs(a, np.inf, loc=self.loc, scale=self.sd, size=chunk, random_state=rng)
            gaps = np.concatenate([gaps, more])
            total = float(np.sum(gaps))
        times = np.cumsum(gaps)
        return times[times < self.length]


class UniformSeries(_BaseTimeSeries):
    """
    num_events evenly spaced announce times, each shifted by U(-d, d). The
    maximum deviation d is drawn per series from a normal distribution
    truncated to [0, upper].
    """
    NAME = "uniform"
    LABEL = "uniform"

    def __init__(self, length, num_events, max_dev_mean, max_dev_sd, max_dev_upper):
        super().__init__(length, num_events)
        self.max_dev_mean = float(max_dev_mean)
        self.max_dev_sd = float(max_dev_sd)
        self.max_dev_upper = float(max_dev_upper)

    def draw_max_deviation(self, rng) -> float:
        if self.max_dev_sd <= 0:
            return min(max(self.max_dev_mean, 0.0), self.max_dev_upper)
        a = (0.0 - self.max_dev_mean) / self.max_dev_sd
        b = (self.max_dev_upper - self.max_dev_mean) / self.max_dev_sd
        return float(truncnorm.rvs(a, b, loc=self.max_dev_mean, scale=self.max_dev_sd, random_state=rng))

    def sample(self, rng):
        d = self.draw_max_deviation(rng)
        spacing = self.length / float(self.num_events)
        base = (np.arange(self.num_events) + 0.5) * spacing
        times = base + rng.uniform(-d, d, size=self.num_events)
        return np.sort(np.clip(times, 0.0, np.nextafter(float(self.length), 0.0)))


class NumEventsFilter:
    """Redraws the wrapped series until it holds exactly `num_events` events."""

    def __init__(self, series: _BaseTimeSeries, num_events: int, max_draws=None):
        self.series = series
        self.num_events = int(num_events)
        self.max_draws = max_draws
        self.NAME = series.NAME

    def generate(self, seed: int) -> List[int]:
        rng = np.random.default_rng(seed)
        draws = 0
        while True:
            draws += 1
            times = self.series.generate(next_seed(rng))
            if len(times) == self.num_events:
                return times
            if self.max_draws is not None and draws >= self.max_draws:
                raise SamplingExhaustedError(
                    f"{self.NAME} time series: no draw with exactly {self.num_events} "
                    f"events after {draws} attempts"
                )

    def properties(self) -> Dict[str, str]:
        return self.series.properties()


class TimeSeriesPolicies:
    REGISTRY = {
        "homogeneous": HomogeneousPoissonSeries,
        "sine": SinePoissonSeries,
        "normal": NormalSeries,
        "uniform": UniformSeries,
    }

    @classmethod
    def from_config(cls, name: str, config, length: int) -> NumEventsFilter:
        """Build the named family for announce times in [0, length)."""
        if name not in cls.REGISTRY:
            raise ValueError(f"Unknown time series family: {name}")
        n = config.num_orders
        if name == "sine":
            series = SinePoissonSeries(length, n, config.intensity_period, config.sine_height_range)
        elif name == "normal":
            series = NormalSeries(length, n, config.normal_sd)
        elif name == "uniform":
            series = UniformSeries(
                length, n,
                config.uniform_max_deviation_mean,
                config.uniform_max_deviation_sd,
                config.uniform_max_deviation_upper,
            )
        else:
            series = cls.REGISTRY[name](length, n)
        return NumEventsFilter(series, n, max_draws=config.max_series_draws)
