import abc
import json
import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from envreg._src.canonical import CanonicalPath
from envreg._src.constants import ACTIVE_ENVIRONMENTS_VAR
from envreg._src.exceptions import NotFound
from envreg._src.models.environment import (
    LocalEnvironment,
    RemoteEnvironment,
    UninitializedEnvironment,
)


logger = logging.getLogger(__name__)

_environment_adapter = TypeAdapter(UninitializedEnvironment)


class ActiveEnvironments():
    """The environments active in the current session, oldest activation first"""

    def __init__(self, envs: Iterable[UninitializedEnvironment] = ()):
        self._envs: List[UninitializedEnvironment] = list(envs)

    def iter(self) -> Iterator[UninitializedEnvironment]:
        return iter(self._envs)

    def __iter__(self):
        return self.iter()

    def __len__(self):
        return len(self._envs)

    def is_empty(self) -> bool:
        return not self._envs

    def last_active(self) -> Optional[UninitializedEnvironment]:
        """Return the most recently activated environment, if any"""
        if not self._envs:
            return None
        return self._envs[-1]

    def to_env_value(self) -> str:
        """Serialize to the value stored in ENVREG_ACTIVE_ENVIRONMENTS"""
        return json.dumps([env.model_dump(mode="json", exclude_none=True) for env in self._envs])


class ActiveSessionSource(abc.ABC):
    """Where the active environments of the current session come from"""

    @abc.abstractmethod
    def active_environments(self) -> ActiveEnvironments:
        ...


class EnvVarActiveSessions(ActiveSessionSource):
    """Reads the active environments from ENVREG_ACTIVE_ENVIRONMENTS.

    The variable holds a JSON list, oldest activation first. Each item is
    either a local environment `{"name": ..., "path": ...}` or a remote one
    `{"owner": ..., "name": ...}`. Items that can't be decoded are ignored.
    """

    def __init__(self, environ: Mapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def active_environments(self) -> ActiveEnvironments:
        raw_value = self.environ.get(ACTIVE_ENVIRONMENTS_VAR, "")
        if not raw_value.strip():
            return ActiveEnvironments()

        try:
            items = json.loads(raw_value)
        except json.JSONDecodeError as err:
            logger.debug("ignoring malformed %s: %s", ACTIVE_ENVIRONMENTS_VAR, err)
            return ActiveEnvironments()

        if not isinstance(items, list):
            logger.debug("ignoring %s, expected a list", ACTIVE_ENVIRONMENTS_VAR)
            return ActiveEnvironments()

        envs = []
        for item in items:
            try:
                env = _environment_adapter.validate_python(item)
            except ValidationError as err:
                logger.debug("ignoring active environment %r: %s", item, err)
                continue
            envs.append(_canonicalize(env))
        return ActiveEnvironments(envs)


def _canonicalize(env: UninitializedEnvironment) -> UninitializedEnvironment:
    """Resolve local paths so they compare equal to registered environments"""
    if isinstance(env, RemoteEnvironment):
        return env
    try:
        path = CanonicalPath.new(env.path).path
    except (NotFound, OSError):
        path = Path(os.path.abspath(env.path))
    return LocalEnvironment(name=env.name, path=path, owner=env.owner)
