# tests/test_config.py
from __future__ import annotations

import pytest
import yaml

from dynurg_gen.configs.load_config import (
    HOUR,
    MINUTE,
    Config,
    FamilyConfig,
    GeneratorConfig,
    load_generator_config,
)
from dynurg_gen.utils.timing import ms_from_distance


def test_packaged_config_matches_defaults():
    assert load_generator_config() == GeneratorConfig()


def test_default_family_levels():
    cfg = GeneratorConfig()
    levels = {f.name: list(f.levels(cfg.dyn_step)) for f in cfg.families}
    assert levels["sine"] == pytest.approx([0.05 * k for k in range(10)])
    assert levels["homogeneous"] == pytest.approx([0.5, 0.55])
    assert levels["normal"] == pytest.approx([0.6, 0.65])
    assert levels["uniform"] == pytest.approx([0.7, 0.75, 0.8, 0.85, 0.9, 0.95, 1.0])


def test_level_count_mismatch_is_rejected():
    with pytest.raises(ValueError):
        GeneratorConfig(families=(FamilyConfig("sine", 0.0, 0.46, 3),))


@pytest.mark.parametrize("changes", [
    {"location_mode": "clustered"},
    {"num_orders": 1},
    {"max_attempts": 0},
    {"dyn_bandwidth": 0.05},
])
def test_invalid_values(changes):
    with pytest.raises(ValueError):
        GeneratorConfig().replace(**changes)


def test_travel_time_bounds():
    cfg = GeneratorConfig()
    assert cfg.travel_time(50.0) == HOUR
    assert cfg.travel_time(cfg.diagonal) == ms_from_distance(cfg.diagonal, cfg.vehicle_speed)
    # 2 * sqrt(2) * 10 km at 50 km/h, rounded up to the millisecond
    assert cfg.two_diagonal_tt == 2036468
    assert cfg.half_diagonal_tt < cfg.one_and_half_diagonal_tt < cfg.two_diagonal_tt


def test_office_hours():
    cfg = GeneratorConfig()
    service = 10 * MINUTE
    assert cfg.office_hours_length(0) == 12 * HOUR - cfg.two_diagonal_tt - service
    urgency = 45 * MINUTE
    assert cfg.office_hours_length(urgency) == 12 * HOUR - urgency - cfg.one_and_half_diagonal_tt - service


def test_partial_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "rng_seed": 7,
        "location_mode": "fixed",
        "scenario": {"num_orders": 40, "length_hours": 8},
        "sampling": {
            "urgency_levels": [0, 30],
            "max_attempts": 1000,
            "families": [{"name": "uniform", "dynamism_range": [0.9, 1.0], "num_levels": 3}],
        },
    }))
    cfg = load_generator_config(str(path))
    assert cfg.rng_seed == 7
    assert cfg.location_mode == "fixed"
    assert cfg.num_orders == 40
    assert cfg.scenario_length == 8 * HOUR
    assert cfg.urgency_levels == (0, 30)
    assert cfg.max_attempts == 1000
    assert cfg.families == (FamilyConfig("uniform", 0.9, 1.0, 3),)
    # untouched sections keep their defaults
    assert cfg.pickup_duration == 5 * MINUTE
    assert cfg.target_num_instances == 50


def test_setup_env_parameters_is_plain_dict():
    params = Config().setup_env_parameters()
    assert params["scenario"]["num_orders"] == 360
    assert params["sampling"]["families"][0]["name"] == "sine"


def test_malformed_family(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"sampling": {"families": [{"name": "sine"}]}}))
    with pytest.raises(ValueError):
        load_generator_config(str(path))


def test_non_mapping_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        Config(str(path))
