import logging
import os
from typing import Iterator

from envreg._src.canonical import CanonicalPath
from envreg._src.config import EnvregConfig
from envreg._src.dot_env import open_environment
from envreg._src.exceptions import DecodeError, NotFound
from envreg._src.link_registry import LinkRegistry, RegistryKey
from envreg._src.models.environment import LocalEnvironment, UninitializedEnvironment


logger = logging.getLogger(__name__)


class RegisteredEnvironments():
    """The environments known to envreg on this machine.

    A thin layer over LinkRegistry that turns registry entries into
    environments by reading the descriptor each entry points to.
    """

    @classmethod
    def open(cls, config: EnvregConfig) -> "RegisteredEnvironments":
        registry = LinkRegistry.open(config.registry_dir)
        return cls(registry, prune_stale=config.prune_stale_entries)

    def __init__(self, registry: LinkRegistry, prune_stale: bool = True):
        self.registry = registry
        self.prune_stale = prune_stale

    def register(self, env: UninitializedEnvironment) -> RegistryKey | None:
        """Register a local environment. Remote environments are ignored."""
        if env.path is None:
            logger.debug("not registering remote environment %s", env)
            return None

        canonical_path = CanonicalPath.new(env.path)
        return self.registry.register(canonical_path)

    def unregister(self, key: RegistryKey) -> None:
        self.registry.unregister(key)

    def unregister_path(self, path: str | os.PathLike) -> RegistryKey:
        """Unregister the environment at `path`, which may already be deleted."""
        try:
            key = self.registry.key_for(CanonicalPath.new(path))
        except (NotFound, OSError):
            key = self.registry.key_for(os.path.abspath(os.path.expanduser(path)))
        self.registry.unregister(key)
        return key

    def try_iter(self) -> Iterator[LocalEnvironment]:
        """Iterate over the registered environments that can still be opened.

        Raises
        ------
        RegistryIOError
            If the registry itself cannot be read
        """
        entries = self.registry.try_iter(prune_stale=self.prune_stale)
        return self._open_entries(entries)

    @staticmethod
    def _open_entries(entries) -> Iterator[LocalEnvironment]:
        for entry in entries:
            try:
                yield open_environment(entry.path)
            except (DecodeError, NotFound) as err:
                logger.debug("skipping environment at %s: %s", entry.path, err.msg)
