# dynurg_gen/errors.py
from __future__ import annotations


class GeneratorError(Exception):
    """Base class of every error raised by the dataset generator."""


class DatasetIOError(GeneratorError):
    """A dataset file or directory could not be written. Aborts the run."""


class ScenarioFormatError(GeneratorError):
    """A serialized scenario could not be parsed."""


class SamplingExhaustedError(GeneratorError):
    """A configured attempt cap was reached before the target was met."""


class InvariantViolation(GeneratorError):
    """Internal consistency check failed while building a candidate."""


class TimeWindowInvariantError(InvariantViolation):
    pass


class TimeWindowStrictnessError(InvariantViolation):
    pass
