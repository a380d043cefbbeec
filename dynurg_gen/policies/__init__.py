# dynurg_gen/policies/__init__.py
from .time_window import assign_time_windows, WindowPair, TravelTimeOracle
from .time_series import (
    TimeSeriesPolicies,
    HomogeneousPoissonSeries,
    SinePoissonSeries,
    NormalSeries,
    UniformSeries,
    NumEventsFilter,
)
from .location import LocationPolicies, UniformLocations, FixedLocations
