from .load_config import (
    Config,
    FamilyConfig,
    GeneratorConfig,
    DEFAULT_CONFIG_PATH,
    MINUTE,
    HOUR,
    load_generator_config,
)

__all__ = [
    "Config",
    "FamilyConfig",
    "GeneratorConfig",
    "DEFAULT_CONFIG_PATH",
    "MINUTE",
    "HOUR",
    "load_generator_config",
]
