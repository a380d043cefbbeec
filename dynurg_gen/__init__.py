# dynurg_gen/__init__.py
"""
Dynamism / Urgency Dataset Generator
------------------------------------
This package provides:
- DatasetGenerator: rejection sampler that fills every (urgency, dynamism) bin
- ScenarioGenerator: builds one candidate pickup-and-delivery scenario per seed
- assign_time_windows: per-parcel pickup/delivery windows for an urgency target
- Config / GeneratorConfig: configuration loader and the frozen run parameters
- Submodules: policies, utils, io, configs, data

Example
-------
>>> from dynurg_gen import DatasetGenerator, load_generator_config
>>> cfg = load_generator_config().replace(urgency_levels=(0,), target_num_instances=1)
>>> gen = DatasetGenerator(cfg, save_path="./dataset")
>>> accepted = gen.generate()
"""

from .generator import DatasetGenerator, AcceptedInstance, DynamismBucket, GeneratorSettings, InstanceRecord
from .scenario_generator import ScenarioGenerator
from .policies.time_window import assign_time_windows, WindowPair
from .configs.load_config import Config, FamilyConfig, GeneratorConfig, load_generator_config
from .errors import (
    GeneratorError,
    DatasetIOError,
    ScenarioFormatError,
    SamplingExhaustedError,
    InvariantViolation,
    TimeWindowInvariantError,
    TimeWindowStrictnessError,
)

from . import policies, utils, io, configs, data

__version__ = "1.0.0"

__all__ = [
    "DatasetGenerator",
    "AcceptedInstance",
    "InstanceRecord",
    "DynamismBucket",
    "GeneratorSettings",
    "ScenarioGenerator",
    "assign_time_windows",
    "WindowPair",
    "Config",
    "FamilyConfig",
    "GeneratorConfig",
    "load_generator_config",
    "GeneratorError",
    "DatasetIOError",
    "ScenarioFormatError",
    "SamplingExhaustedError",
    "InvariantViolation",
    "TimeWindowInvariantError",
    "TimeWindowStrictnessError",
    "policies",
    "utils",
    "io",
    "configs",
    "data",
]
