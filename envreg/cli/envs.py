from typing import Iterable, List

import typer
from pydantic import TypeAdapter
from rich.console import Console
from rich.markup import escape

from envreg._src.active import EnvVarActiveSessions
from envreg._src.constants import REMOTE_PATH_PLACEHOLDER
from envreg._src.models.environment import (
    EnvironmentView,
    UninitializedEnvironment,
    display_name,
)
from envreg._src.reconcile import partition, project, project_active
from envreg._src.registered import RegisteredEnvironments


_view_list = TypeAdapter(List[EnvironmentView])


def envs(
    ctx: typer.Context,
    active: bool = typer.Option(
        False,
        "--active",
        help="only list the active environments"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="print the environments as json"
    ),
):
    """List all environments known to envreg

    The most recently activated environment is printed in bold.
    """
    source = EnvVarActiveSessions()
    console = Console(highlight=False, soft_wrap=True)

    if active:
        active_envs = source.active_environments()
        if as_json:
            print(_view_list.dump_json(project_active(active_envs), indent=2).decode())
            return
        if active_envs.is_empty():
            console.print("No active environments")
            return
        console.print("Active environments:")
        _print_environments(console, list(active_envs.iter()), highlight_last=True)
        return

    registry = RegisteredEnvironments.open(ctx.obj.config)
    env_partition = partition(registry, source)

    if as_json:
        print(project(env_partition).model_dump_json(indent=2))
        return

    if env_partition.is_empty():
        console.print("No environments known to envreg")
        return

    if not env_partition.active.is_empty():
        console.print("Active environments:")
        _print_environments(console, list(env_partition.active.iter()), highlight_last=True)

    if env_partition.inactive:
        console.print("Inactive environments:")
        _print_environments(console, env_partition.inactive, highlight_last=False)


def format_environments(envs: Iterable[UninitializedEnvironment]) -> List[str]:
    """Format one line per environment, names padded to the widest name"""
    envs = list(envs)
    widest = max((len(display_name(env)) for env in envs), default=0)
    return [f"{display_name(env):<{widest}}  {_format_path(env)}" for env in envs]


def _format_path(env: UninitializedEnvironment) -> str:
    if env.path is None:
        return REMOTE_PATH_PLACEHOLDER
    return str(env.path)


def _print_environments(console: Console, envs: List[UninitializedEnvironment], highlight_last: bool):
    lines = format_environments(envs)
    for i, line in enumerate(lines):
        if highlight_last and i == len(lines) - 1:
            console.print(f"[bold]{escape(line)}[/bold]")
        else:
            console.print(escape(line))
