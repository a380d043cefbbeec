# dynurg_gen/io/saving.py
from __future__ import annotations
from typing import Iterable, Mapping, Optional, Tuple
import json
import os

from ..data.scenario import Scenario
from ..errors import DatasetIOError, ScenarioFormatError

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


class FileStorage:
    """
    Minimal storage layer. Any OSError is fatal for a dataset run and is
    re-raised as DatasetIOError.
    """

    def create_directories(self, path: str) -> None:
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise DatasetIOError(f"Could not create directory {path}: {e}") from e

    def create_parent_dirs(self, path: str) -> None:
        parent = os.path.dirname(path)
        if parent:
            self.create_directories(parent)

    def write(self, path: str, data: bytes) -> None:
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise DatasetIOError(f"Could not write {path}: {e}") from e

    def read(self, path: str) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise DatasetIOError(f"Could not read {path}: {e}") from e


_default_storage = FileStorage()


def scenario_to_bytes(scenario: Scenario) -> bytes:
    return json.dumps(scenario.to_dict(), indent=1).encode("utf-8")


def scenario_from_bytes(data: bytes, source: str = "<bytes>") -> Scenario:
    try:
        return Scenario.from_dict(json.loads(data.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ScenarioFormatError(f"Malformed scenario file {source}: {e}") from e


def write_scenario(scenario: Scenario, path: str, storage: Optional[FileStorage] = None) -> str:
    (storage or _default_storage).write(path, scenario_to_bytes(scenario))
    return path


def read_scenario(path: str, storage: Optional[FileStorage] = None) -> Scenario:
    return scenario_from_bytes((storage or _default_storage).read(path), source=path)


def write_location_list(points: Iterable[Tuple[float, float]], path: str,
                        storage: Optional[FileStorage] = None) -> str:
    """One 'x y' line per point."""
    text = "".join(f"{float(x)!r} {float(y)!r}\n" for x, y in points)
    (storage or _default_storage).write(path, text.encode("utf-8"))
    return path


def write_times(day_length: int, times: Iterable[int], path: str,
                storage: Optional[FileStorage] = None) -> str:
    """First line the horizon end, then one announce time per line."""
    lines = [str(int(day_length))] + [str(int(t)) for t in times]
    (storage or _default_storage).write(path, ("\n".join(lines) + "\n").encode("utf-8"))
    return path


def _format_value(value) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return repr(value)
    return str(value)


def format_properties(properties: Mapping[str, object]) -> str:
    return "\n".join(f"{k} = {_format_value(v)}" for k, v in properties.items())


def write_properties(properties: Mapping[str, object], path: str,
                     storage: Optional[FileStorage] = None) -> str:
    (storage or _default_storage).write(path, format_properties(properties).encode("utf-8"))
    return path
