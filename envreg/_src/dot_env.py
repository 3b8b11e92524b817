# Every environment is a directory holding a .envreg/env.yaml
# descriptor. The descriptor only needs to say what the environment
# is called; what it contains is up to the tools that build it.

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from envreg._src.canonical import CanonicalPath
from envreg._src.constants import DOT_ENV_DIR_NAME, ENV_FILE_NAME
from envreg._src.exceptions import DecodeError, EnvironmentExists
from envreg._src.models.environment import EnvironmentManifest, LocalEnvironment
from envreg._src.utils import ensure_dir, get_name_from_path


def env_file_path(path: str | os.PathLike) -> Path:
    return Path(path) / DOT_ENV_DIR_NAME / ENV_FILE_NAME


def open_environment(path: str | os.PathLike) -> LocalEnvironment:
    """Open the environment at `path`.

    Parameters
    ----------
    path: str | os.PathLike
        The environment directory, the one containing .envreg

    Returns
    -------
    LocalEnvironment
        The environment, with its canonical path

    Raises
    ------
    NotFound
        If `path` does not exist
    DecodeError
        If the descriptor file is missing or malformed
    """
    try:
        canonical = CanonicalPath.new(path)
    except OSError as err:
        raise DecodeError(path, err.strerror or str(err)) from err
    manifest = _parse_env_file(env_file_path(canonical.path))
    return LocalEnvironment(name=manifest.name, path=canonical.path, owner=manifest.owner)


def init_environment(path: str | os.PathLike, name: str | None = None) -> LocalEnvironment:
    """Create the descriptor for a new environment in `path`.

    The name defaults to the name of the directory.
    """
    canonical = CanonicalPath.new(path)
    env_file = env_file_path(canonical.path)
    if env_file.exists():
        raise EnvironmentExists(canonical)

    if name is None:
        name = get_name_from_path(canonical.path)
    manifest = EnvironmentManifest(name=name)

    ensure_dir(env_file.parent)
    with open(env_file, "w") as file:
        yaml.safe_dump(manifest.model_dump(exclude_none=True), file, sort_keys=False)

    return LocalEnvironment(name=manifest.name, path=canonical.path)


def _parse_env_file(path: Path) -> EnvironmentManifest:
    try:
        with open(path, "rb") as file:
            raw_manifest = yaml.safe_load(file)
    except OSError as err:
        raise DecodeError(path, err.strerror or str(err)) from err
    except yaml.YAMLError as err:
        raise DecodeError(path, f"invalid yaml: {err}") from err

    if not isinstance(raw_manifest, dict):
        raise DecodeError(path, "expected a mapping")

    try:
        return EnvironmentManifest.model_validate(raw_manifest)
    except ValidationError as err:
        raise DecodeError(path, str(err)) from err
