from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from envreg._src.constants import ENV_FILE_VERSION


class EnvironmentManifest(BaseModel):
    """Contents of an environment's .envreg/env.yaml"""
    model_config = ConfigDict(extra="forbid")

    version: int = ENV_FILE_VERSION
    name: str = Field(min_length=1)
    # set for environments that were pulled from a remote owner
    owner: Optional[str] = None


class LocalEnvironment(BaseModel):
    """An environment with a directory on this machine"""
    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    owner: Optional[str] = None

    def identity(self) -> tuple[str, str]:
        return (self.name, str(self.path))

    def __eq__(self, other):
        if isinstance(other, (LocalEnvironment, RemoteEnvironment)):
            return self.identity() == other.identity()
        return False

    def __lt__(self, other):
        return self.identity() < other.identity()

    def __hash__(self):
        return hash(self.identity())

    def __str__(self):
        return f"{self.name} ({self.path})"


class RemoteEnvironment(BaseModel):
    """An environment known only by its remote owner and name"""
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def path(self) -> None:
        return None

    @property
    def display_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def identity(self) -> tuple[str, str]:
        return (self.display_name, "")

    def __eq__(self, other):
        if isinstance(other, (LocalEnvironment, RemoteEnvironment)):
            return self.identity() == other.identity()
        return False

    def __lt__(self, other):
        return self.identity() < other.identity()

    def __hash__(self):
        return hash(self.identity())

    def __str__(self):
        return f"{self.display_name} (remote)"


UninitializedEnvironment = Union[LocalEnvironment, RemoteEnvironment]


def display_name(env: UninitializedEnvironment) -> str:
    return env.identity()[0]


class EnvironmentView(BaseModel):
    """Serialized form of an environment, `path` is None for remote environments"""
    name: str
    path: Optional[str] = None

    @classmethod
    def from_environment(cls, env: UninitializedEnvironment) -> "EnvironmentView":
        path = None if env.path is None else str(env.path)
        return cls(name=display_name(env), path=path)


class EnvironmentsProjection(BaseModel):
    """Active and inactive environments, ready to be dumped as JSON"""
    active: List[EnvironmentView]
    inactive: List[EnvironmentView]
