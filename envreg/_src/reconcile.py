from collections.abc import Iterable
from dataclasses import dataclass
from typing import List

from envreg._src.active import ActiveEnvironments, ActiveSessionSource
from envreg._src.models.environment import (
    EnvironmentsProjection,
    EnvironmentView,
    UninitializedEnvironment,
)
from envreg._src.registered import RegisteredEnvironments


@dataclass(frozen=True)
class EnvironmentPartition:
    active: ActiveEnvironments
    inactive: List[UninitializedEnvironment]

    def is_empty(self) -> bool:
        return self.active.is_empty() and not self.inactive


def registered_environments(registry: RegisteredEnvironments) -> List[UninitializedEnvironment]:
    """All registered environments, sorted and without duplicates.

    A registry that can't be read raises RegistryIOError, an empty
    registry returns an empty list.
    """
    return sorted(set(registry.try_iter()))


def inactive_environments(
    registered: Iterable[UninitializedEnvironment],
    active: Iterable[UninitializedEnvironment],
) -> List[UninitializedEnvironment]:
    """Return the registered environments that are not active.

    Environments are compared by name and path, an environment that is
    both registered and active only counts as active.
    """
    available = set(registered)
    available.difference_update(active)
    return sorted(available)


def partition(registry: RegisteredEnvironments, source: ActiveSessionSource) -> EnvironmentPartition:
    active = source.active_environments()
    inactive = inactive_environments(registered_environments(registry), active.iter())
    return EnvironmentPartition(active=active, inactive=inactive)


def project(env_partition: EnvironmentPartition) -> EnvironmentsProjection:
    return EnvironmentsProjection(
        active=project_active(env_partition.active),
        inactive=[EnvironmentView.from_environment(env) for env in env_partition.inactive],
    )


def project_active(active: ActiveEnvironments) -> List[EnvironmentView]:
    return [EnvironmentView.from_environment(env) for env in active.iter()]
