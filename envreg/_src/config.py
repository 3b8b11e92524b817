"""Configuration for envreg.

Values are layered, later layers win:

1. defaults derived from the XDG base directories
2. ``config.yaml`` in the config directory
3. ``ENVREG_<FIELD>`` environment variables
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from envreg._src.constants import (
    CONFIG_DIR_ENV_VAR,
    CONFIG_FILE_NAME,
    ENV_VAR_PREFIX,
    ENVREG_DIR_NAME,
    REGISTRY_DIR_NAME,
)
from envreg._src.exceptions import ConfigError


logger = logging.getLogger(__name__)


class EnvregConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    cache_dir: Path
    data_dir: Path
    config_dir: Path
    # remove registry entries whose environment was deleted when listing
    prune_stale_entries: bool = True

    @property
    def registry_dir(self) -> Path:
        return self.cache_dir / REGISTRY_DIR_NAME


def _xdg_dir(environ: Mapping[str, str], var: str, fallback: str) -> Path:
    base = environ.get(var)
    if base:
        return Path(base).expanduser() / ENVREG_DIR_NAME
    return Path.home() / fallback / ENVREG_DIR_NAME


def default_config_dir(environ: Mapping[str, str] | None = None) -> Path:
    environ = os.environ if environ is None else environ
    config_dir = environ.get(CONFIG_DIR_ENV_VAR)
    if config_dir:
        return Path(config_dir).expanduser()
    logger.debug("`%s` not set", CONFIG_DIR_ENV_VAR)
    return _xdg_dir(environ, "XDG_CONFIG_HOME", ".config")


def load_config(environ: Mapping[str, str] | None = None) -> EnvregConfig:
    """Load the configuration from defaults, the config file and the environment.

    Args:
        environ: Environment variables to read (defaults to os.environ)

    Returns:
        EnvregConfig instance with the merged values

    Raises:
        ConfigError: If the config file can't be read or holds invalid values
    """
    environ = os.environ if environ is None else environ
    config_dir = default_config_dir(environ)
    config_file = config_dir / CONFIG_FILE_NAME

    raw_config = {
        "cache_dir": _xdg_dir(environ, "XDG_CACHE_HOME", ".cache"),
        "data_dir": _xdg_dir(environ, "XDG_DATA_HOME", os.path.join(".local", "share")),
        "config_dir": config_dir,
    }
    raw_config.update(_read_config_file(config_file))

    for field in EnvregConfig.model_fields:
        value = environ.get(f"{ENV_VAR_PREFIX}{field.upper()}")
        if value is not None:
            raw_config[field] = value

    try:
        return EnvregConfig.model_validate(raw_config)
    except ValidationError as err:
        raise ConfigError(config_file, err) from err


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path, "r") as file:
            data = yaml.safe_load(file)
    except (OSError, yaml.YAMLError) as err:
        raise ConfigError(path, err) from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path, "expected a mapping at the top level")
    return data
