# tests/test_time_series.py
from __future__ import annotations

import numpy as np
import pytest

from dynurg_gen.configs.load_config import HOUR, MINUTE, GeneratorConfig
from dynurg_gen.errors import SamplingExhaustedError
from dynurg_gen.policies.time_series import (
    HomogeneousPoissonSeries,
    NormalSeries,
    NumEventsFilter,
    SinePoissonSeries,
    TimeSeriesPolicies,
    UniformSeries,
)
from dynurg_gen.utils.metrics import measure_dynamism

LENGTH = 10 * HOUR


def assert_valid(times, n, length=LENGTH):
    assert len(times) == n
    assert times == sorted(times)
    assert all(isinstance(t, int) for t in times)
    assert all(0 <= t < length for t in times)


@pytest.mark.parametrize("family", ["homogeneous", "sine", "normal", "uniform"])
def test_families_produce_exact_order_count(family):
    config = GeneratorConfig(num_orders=30)
    series = TimeSeriesPolicies.from_config(family, config, LENGTH)
    for seed in range(3):
        assert_valid(series.generate(seed), 30)


def test_series_are_reproducible():
    series = TimeSeriesPolicies.from_config("sine", GeneratorConfig(num_orders=30), LENGTH)
    assert series.generate(5) == series.generate(5)


def test_uniform_without_jitter_is_evenly_spaced():
    series = UniformSeries(1_000_000, 100, 0.0, 0.0, 0.0)
    times = series.generate(1)
    assert_valid(times, 100, 1_000_000)
    assert np.all(np.diff(times) == 10_000)
    assert measure_dynamism(times, 1_000_000) == 1.0


def test_uniform_max_deviation_stays_in_bounds():
    series = UniformSeries(LENGTH, 50, MINUTE, MINUTE, 15 * MINUTE)
    rng = np.random.default_rng(0)
    draws = [series.draw_max_deviation(rng) for _ in range(200)]
    assert min(draws) >= 0.0
    assert max(draws) <= 15 * MINUTE


def test_normal_location_matches_mean_gap():
    series = NormalSeries(LENGTH, 300, 2.4 * MINUTE)
    assert series._truncated_mean(series.loc) == pytest.approx(LENGTH / 300, rel=1e-6)


def test_sine_rejects_non_positive_height():
    with pytest.raises(ValueError):
        SinePoissonSeries(LENGTH, 10, HOUR, height_range=(-1.0, 2.0))


def test_filter_gives_up_after_max_draws():
    # evenly spaced series always has 10 events, never 11
    series = NumEventsFilter(UniformSeries(LENGTH, 10, 0.0, 0.0, 0.0), 11, max_draws=3)
    with pytest.raises(SamplingExhaustedError):
        series.generate(0)


def test_properties():
    homogeneous = HomogeneousPoissonSeries(LENGTH, 360)
    assert homogeneous.properties()["time_series"] == "homogenous Poisson"
    assert float(homogeneous.properties()["time_series.intensity"]) == pytest.approx(360 / LENGTH)

    sine = SinePoissonSeries(LENGTH, 360, HOUR)
    props = sine.properties()
    assert props["time_series.period"] == str(HOUR)
    assert float(props["time_series.num_periods"]) == pytest.approx(10.0)


def test_unknown_family():
    with pytest.raises(ValueError):
        TimeSeriesPolicies.from_config("bursty", GeneratorConfig(), LENGTH)
