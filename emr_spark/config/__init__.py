"""Settings models and loading."""

from emr_spark.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILENAME,
    apply_env_overrides,
    default_config_path,
    load_settings,
    parse_settings,
)
from emr_spark.config.models import ConfigFile, EmrConfiguration, Settings

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigFile",
    "DEFAULT_CONFIG_FILENAME",
    "EmrConfiguration",
    "Settings",
    "apply_env_overrides",
    "default_config_path",
    "load_settings",
    "parse_settings",
]
