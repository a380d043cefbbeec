# dynurg_gen/generator.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import getpass
import logging
import os

from tqdm import tqdm

from .configs.load_config import FamilyConfig, GeneratorConfig, MINUTE, load_generator_config
from .data.scenario import Scenario
from .errors import InvariantViolation, SamplingExhaustedError
from .io.saving import FileStorage, write_location_list, write_properties, write_scenario, write_times
from .policies.location import LocationPolicies
from .policies.time_series import TimeSeriesPolicies
from .scenario_generator import ScenarioGenerator
from .utils.metrics import (
    UrgencySummary,
    check_time_window_strictness,
    count_parcels,
    get_arrival_times,
    get_event_type_counts,
    get_service_points,
    measure_dynamism,
    measure_urgency,
)
from .utils.seeding import derive_seed

logger = logging.getLogger(__name__)

# seed keys, kept apart so location and candidate streams never overlap
_LOCATION_STREAM = 0
_CANDIDATE_STREAM = 1


@dataclass(frozen=True)
class GeneratorSettings:
    """One (urgency, arrival family) configuration of the dataset."""
    time_series_type: str
    urgency: int                # minutes
    day_length: int             # ms
    office_hours: int           # ms, orders are announced in [0, office_hours)
    properties: Tuple[Tuple[str, str], ...] = ()

    @property
    def urgency_ms(self) -> int:
        return self.urgency * MINUTE

    @property
    def property_map(self) -> Dict[str, str]:
        return dict(self.properties)


@dataclass(frozen=True)
class InstanceRecord:
    """What a run keeps of an accepted instance once its files are written."""
    problem_class: str
    instance_id: str
    metadata: Dict[str, object]
    file_stem: str


@dataclass(frozen=True)
class AcceptedInstance:
    scenario: Scenario
    problem_class: str
    instance_id: str
    metadata: Dict[str, object]
    file_stem: str

    @property
    def record(self) -> InstanceRecord:
        return InstanceRecord(self.problem_class, self.instance_id, self.metadata, self.file_stem)


@dataclass
class DynamismBucket:
    """Accepted instances of one quantized dynamism level; append only."""
    level: float
    capacity: int
    instances: List[AcceptedInstance] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.instances)

    @property
    def is_full(self) -> bool:
        return len(self.instances) >= self.capacity

    def add(self, instance: AcceptedInstance) -> None:
        if self.is_full:
            raise ValueError(f"Bucket {self.level:.2f} is full.")
        self.instances.append(instance)


class DatasetGenerator:
    """
    Rejection sampler that fills, for every urgency level and arrival family,
    each dynamism bin of the family with exactly `target_num_instances`
    scenarios. Accepted scenarios are written to `save_path` immediately.

    Candidate `attempt` of configuration `index` is built from
    derive_seed(rng_seed, 1, index, attempt), so a run is reproducible from its
    master seed and every configuration is reproducible on its own.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None, config_path: Optional[str] = None, **kwargs):
        self.config = config if config is not None else load_generator_config(config_path)
        cfg = self.config

        self.save_path: str = kwargs.get("save_path") or cfg.dataset_dir
        self.storage: FileStorage = kwargs.get("storage") or FileStorage()
        self.show_progress: bool = bool(kwargs.get("show_progress", True))
        self.clock: Callable[[], datetime] = kwargs.get("clock") or datetime.now
        self.creator: str = kwargs.get("creator") or _user_name()

        self.locations = LocationPolicies.from_config(cfg, derive_seed(cfg.rng_seed, _LOCATION_STREAM))
        self.accepted: List[InstanceRecord] = []

    # ------------------------------------------------------------------ #
    # configuration grid
    # ------------------------------------------------------------------ #
    def build_settings(self, urgency_minutes: int, family: str) -> Tuple[GeneratorSettings, ScenarioGenerator]:
        cfg = self.config
        urgency = urgency_minutes * MINUTE
        office_hours = cfg.office_hours_length(urgency)
        if office_hours <= 0:
            raise ValueError(
                f"Urgency {urgency_minutes} min leaves no office hours in a {cfg.scenario_length} ms scenario."
            )
        time_series = TimeSeriesPolicies.from_config(family, cfg, office_hours)

        props: Dict[str, str] = {"expected_num_orders": str(cfg.num_orders)}
        props.update(time_series.properties())
        props["pickup_duration"] = str(cfg.pickup_duration)
        props["delivery_duration"] = str(cfg.delivery_duration)
        props["width_height"] = f"{cfg.area_width:1.1f}x{cfg.area_width:1.1f}"

        settings = GeneratorSettings(
            time_series_type=family,
            urgency=urgency_minutes,
            day_length=cfg.scenario_length,
            office_hours=office_hours,
            properties=tuple(props.items()),
        )
        scenario_generator = ScenarioGenerator(cfg, urgency, time_series, self.locations, properties=props)
        return settings, scenario_generator

    def configurations(self) -> List[Tuple[GeneratorSettings, FamilyConfig, ScenarioGenerator]]:
        """All (urgency, family) configurations, urgency major."""
        out = []
        for urg in self.config.urgency_levels:
            for family in self.config.families:
                settings, scenario_generator = self.build_settings(urg, family.name)
                out.append((settings, family, scenario_generator))
        logger.info("num generators: %d", len(out))
        return out

    # ------------------------------------------------------------------ #
    # sampling
    # ------------------------------------------------------------------ #
    def generate(self) -> List[InstanceRecord]:
        """
        Fill every bin of every configuration. Returns one InstanceRecord per
        accepted instance in acceptance order; scenarios are only held in the
        buckets of the configuration being sampled.
        """
        self.accepted = []
        for index, (settings, family, scenario_generator) in enumerate(self.configurations()):
            logger.info("URGENCY: %d %s", settings.urgency, settings.time_series_type)
            self.create_scenarios(index, settings, family, scenario_generator)
        logger.info("DONE. %d instances written to %s", len(self.accepted), self.save_path)
        return self.accepted

    def create_scenarios(self, index: int, settings: GeneratorSettings, family: FamilyConfig,
                         scenario_generator: ScenarioGenerator) -> Dict[float, DynamismBucket]:
        cfg = self.config
        levels = family.levels(cfg.dyn_step)
        target = cfg.target_num_instances
        total = len(levels) * target
        buckets: Dict[float, DynamismBucket] = {}
        num_accepted = 0
        attempt = 0

        pbar = tqdm(total=total, desc=f"{settings.urgency}-{family.name}", disable=not self.show_progress)
        try:
            while num_accepted < total:
                if cfg.max_attempts is not None and attempt >= cfg.max_attempts:
                    raise SamplingExhaustedError(
                        f"urgency {settings.urgency} / {family.name}: {num_accepted} of {total} "
                        f"instances after {attempt} attempts"
                    )
                seed = derive_seed(cfg.rng_seed, _CANDIDATE_STREAM, index, attempt)
                attempt += 1

                try:
                    scenario = scenario_generator.generate(seed)
                    verdict = self.evaluate(scenario, settings, family, buckets)
                except InvariantViolation as e:
                    logger.warning("attempt %d discarded: %s", attempt, e)
                    continue
                if verdict is None:
                    continue

                level, urgency, dynamism = verdict
                bucket = buckets.setdefault(level, DynamismBucket(level, target))
                instance = self.accept(scenario, settings, bucket, urgency, dynamism)
                bucket.add(instance)
                self.accepted.append(instance.record)
                num_accepted += 1
                pbar.update(1)
                pbar.set_postfix(attempts=attempt)
        finally:
            pbar.close()
        return buckets

    def quantize(self, dynamism: float) -> Tuple[float, bool]:
        """Nearest canonical dynamism level and whether `dynamism` lies in its band."""
        step = self.config.dyn_step
        k = int(round(dynamism / step))
        level = round(k * step, 10)
        return level, abs(dynamism - k * step) < self.config.dyn_bandwidth

    def evaluate(self, scenario: Scenario, settings: GeneratorSettings, family: FamilyConfig,
                 buckets: Dict[float, DynamismBucket]) -> Optional[Tuple[float, UrgencySummary, float]]:
        """
        Acceptance test. Returns (level, urgency summary, dynamism) if the
        scenario is accepted, None if it is rejected. Raises
        TimeWindowStrictnessError for scenarios with unusable time windows.
        """
        cfg = self.config
        check_time_window_strictness(scenario)

        urgency = measure_urgency(scenario)
        if abs(urgency.mean - settings.urgency_ms) >= cfg.urgency_tolerance or urgency.sd >= cfg.urgency_tolerance:
            logger.debug("reject: urgency %.3f (sd %.3f), expected %d", urgency.mean, urgency.sd, settings.urgency_ms)
            return None

        num_parcels = count_parcels(scenario)
        if num_parcels != cfg.num_orders:
            logger.debug("reject: %d parcels, expected %d", num_parcels, cfg.num_orders)
            return None

        dynamism = measure_dynamism(get_arrival_times(scenario), settings.office_hours)
        level, in_band = self.quantize(dynamism)
        if not (in_band and family.dyn_lb <= dynamism <= family.dyn_ub):
            logger.debug("reject: dynamism %1.3f", dynamism)
            return None
        if level not in family.levels(cfg.dyn_step):
            logger.debug("reject: dynamism level %1.2f is not a bin of %s", level, family.name)
            return None
        bucket = buckets.get(level)
        if bucket is not None and bucket.is_full:
            logger.debug("reject: bucket %1.2f is full", level)
            return None
        return level, urgency, dynamism

    # ------------------------------------------------------------------ #
    # persistence
    # ------------------------------------------------------------------ #
    def accept(self, scenario: Scenario, settings: GeneratorSettings, bucket: DynamismBucket,
               urgency: UrgencySummary, dynamism: float) -> AcceptedInstance:
        instance_id = f"#{len(bucket)}"
        problem_class = f"{settings.urgency}-{bucket.level:1.2f}"
        logger.info("ACCEPT %s%s (dynamism %1.3f)", problem_class, instance_id, dynamism)

        final = scenario.with_ids(problem_class, instance_id)
        metadata = self.build_metadata(final, urgency, dynamism, settings)
        file_stem = os.path.join(self.save_path, problem_class + instance_id)
        self.write_instance(final, metadata, file_stem)
        return AcceptedInstance(final, problem_class, instance_id, metadata, file_stem)

    def build_metadata(self, scenario: Scenario, urgency: UrgencySummary, dynamism: float,
                       settings: GeneratorSettings) -> Dict[str, object]:
        meta: Dict[str, object] = {
            "problem_class": scenario.problem_class,
            "id": scenario.instance_id,
            "dynamism": dynamism,
            "urgency_mean": urgency.mean,
            "urgency_sd": urgency.sd,
            "creation_date": self.clock().isoformat(timespec="milliseconds"),
            "creator": self.creator,
            "day_length": settings.day_length,
            "office_opening_hours": settings.office_hours,
        }
        meta.update(settings.property_map)
        meta.update(get_event_type_counts(scenario))
        return meta

    def write_instance(self, scenario: Scenario, metadata: Dict[str, object], file_stem: str) -> None:
        self.storage.create_parent_dirs(file_stem)
        write_properties(metadata, file_stem + ".properties", storage=self.storage)
        write_location_list(get_service_points(scenario), file_stem + ".points", storage=self.storage)
        write_times(scenario.time_window.end, get_arrival_times(scenario), file_stem + ".times", storage=self.storage)
        write_scenario(scenario, file_stem + ".scen", storage=self.storage)


def _user_name() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"
