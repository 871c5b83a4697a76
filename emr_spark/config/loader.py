"""Settings loading from YAML and the environment.

- :func:`default_config_path` — ``--config`` flag → ``EMR_SPARK_CONFIG`` → ``./emr-spark.yaml``
- :func:`load_settings` — parse the YAML file into :class:`Settings`
- :func:`apply_env_overrides` — ``EMR_SPARK_CLUSTER_NAME`` / ``EMR_SPARK_CLUSTER_ID``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from emr_spark.config.models import ConfigFile, Settings
from emr_spark.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "emr-spark.yaml"
CONFIG_ENV_VAR = "EMR_SPARK_CONFIG"

_ENV_OVERRIDES = {
    "EMR_SPARK_CLUSTER_NAME": "cluster_name",
    "EMR_SPARK_CLUSTER_ID": "cluster_id",
}


def default_config_path(explicit: Optional[str] = None) -> Path:
    """Return the settings file path.

    Precedence: *explicit* → ``EMR_SPARK_CONFIG`` → ``emr-spark.yaml`` in cwd.
    """
    return Path(
        explicit
        or os.environ.get(CONFIG_ENV_VAR)
        or DEFAULT_CONFIG_FILENAME
    )


def parse_settings(raw: Dict[str, Any]) -> Settings:
    """Validate a raw mapping (the whole YAML document) into :class:`Settings`.

    Raises :class:`ConfigError` with pydantic's message on invalid input.
    """
    try:
        return ConfigFile.model_validate(raw).emr_spark
    except ValidationError as exc:
        raise ConfigError(f"Invalid emr-spark settings: {exc}") from exc


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """Load settings from *path*, falling back to defaults if it does not exist."""
    path = default_config_path(str(path) if path else None)
    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {path}: {exc}") from exc
        logger.debug("Loaded settings from %s", path)
    else:
        logger.debug("No settings file at %s; using defaults", path)

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    if raw.get("emr_spark") is None:
        raw = {**raw, "emr_spark": {}}

    return apply_env_overrides(parse_settings(raw))


def apply_env_overrides(settings: Settings) -> Settings:
    """Return a copy of *settings* with environment overrides applied."""
    updates: Dict[str, str] = {}
    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var, "")
        if value:
            updates[field_name] = value
    if not updates:
        return settings
    logger.debug("Applying env overrides: %s", sorted(updates))
    return settings.model_copy(update=updates)
