from pathlib import Path

import pytest

from envreg._src.config import EnvregConfig
from envreg._src.dot_env import init_environment
from envreg._src.link_registry import LinkRegistry
from envreg._src.models.environment import LocalEnvironment
from envreg._src.registered import RegisteredEnvironments


@pytest.fixture
def config(tmp_path: Path) -> EnvregConfig:
    return EnvregConfig(
        cache_dir=tmp_path / "cache",
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def link_registry(config: EnvregConfig) -> LinkRegistry:
    return LinkRegistry.open(config.registry_dir)


@pytest.fixture
def registered(config: EnvregConfig) -> RegisteredEnvironments:
    return RegisteredEnvironments.open(config)


@pytest.fixture
def make_env(tmp_path: Path):
    """Create an environment directory under tmp_path/envs/<dirname>"""

    def _make_env(dirname: str, name: str | None = None) -> LocalEnvironment:
        path = tmp_path / "envs" / dirname
        path.mkdir(parents=True)
        return init_environment(path, name=name)

    return _make_env
