import functools
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from typing_extensions import Annotated

from envreg._src.config import EnvregConfig, load_config
from envreg._src.constants import DOT_ENV_DIR_NAME
from envreg._src.dot_env import init_environment, open_environment
from envreg._src.exceptions import EnvregError
from envreg._src.registered import RegisteredEnvironments
from envreg.cli.envs import envs


logger = logging.getLogger(__name__)

err_console = Console(stderr=True, highlight=False)


@dataclass
class CliState:
    config: EnvregConfig


def handle_errors(func):
    """Print envreg errors as a message and exit 1 instead of a traceback"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EnvregError as err:
            err_console.print(f"[red]{escape(err.msg)}[/red]")
            raise typer.Exit(code=1)
    return wrapper


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


DirArgument = Annotated[
    Optional[Path],
    typer.Argument(
        help="environment directory, defaults to the current directory",
        show_default=False,
    ),
]


@app.callback()
@handle_errors
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="print debug logs"
    ),
):
    """Keep track of the environments on this machine"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CliState(config=load_config())


app.command()(handle_errors(envs))


@app.command()
@handle_errors
def init(
    ctx: typer.Context,
    path: DirArgument = None,
    name: str = typer.Option(
        None,
        help="name of the environment, defaults to the directory name"
    ),
):
    """Create an environment in a directory and register it"""
    path = _dir_or_cwd(path)
    env = init_environment(path, name=name)
    RegisteredEnvironments.open(ctx.obj.config).register(env)
    print(f"Created environment {env.name} in {env.path}")


@app.command()
@handle_errors
def register(
    ctx: typer.Context,
    path: DirArgument = None,
):
    """Register an existing environment"""
    env = open_environment(_dir_or_cwd(path))
    key = RegisteredEnvironments.open(ctx.obj.config).register(env)
    logger.debug("registry key for %s: %s", env.path, key)
    print(f"Registered environment {env.name} at {env.path}")


@app.command()
@handle_errors
def unregister(
    ctx: typer.Context,
    path: DirArgument = None,
    key: str = typer.Option(
        None,
        help="registry key to remove instead of a directory"
    ),
):
    """Forget an environment without deleting it"""
    registry = RegisteredEnvironments.open(ctx.obj.config)
    if key is not None:
        registry.unregister(key)
        print(f"Unregistered {key}")
        return

    path = _dir_or_cwd(path)
    registry.unregister_path(path)
    print(f"Unregistered {path}")


@app.command()
@handle_errors
def delete(
    ctx: typer.Context,
    path: DirArgument = None,
):
    """Delete an environment's descriptor and unregister it"""
    env = open_environment(_dir_or_cwd(path))
    registry = RegisteredEnvironments.open(ctx.obj.config)
    shutil.rmtree(env.path / DOT_ENV_DIR_NAME)
    registry.unregister_path(env.path)
    print(f"Deleted environment {env.name} at {env.path}")


def _dir_or_cwd(path: Optional[Path]) -> Path:
    if path is None:
        return Path.cwd()
    return path
