"""Tests for the envreg command line."""

import json
import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from envreg._src.active import ActiveEnvironments
from envreg._src.constants import ACTIVE_ENVIRONMENTS_VAR
from envreg._src.dot_env import open_environment
from envreg._src.models.environment import RemoteEnvironment
from envreg.cli.envs import format_environments
from envreg.cli.root import app


@pytest.fixture
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {
        "ENVREG_CONFIG_DIR": str(tmp_path / "config"),
        "ENVREG_CACHE_DIR": str(tmp_path / "cache"),
        "ENVREG_DATA_DIR": str(tmp_path / "data"),
        ACTIVE_ENVIRONMENTS_VAR: "",
    }


@pytest.fixture
def invoke(cli_env):
    runner = CliRunner()

    def _invoke(*args: str, active=()):
        env = dict(cli_env)
        env[ACTIVE_ENVIRONMENTS_VAR] = ActiveEnvironments(active).to_env_value()
        return runner.invoke(app, list(args), env=env)

    return _invoke


def _mkdir(tmp_path: Path, name: str) -> Path:
    path = tmp_path / "envs" / name
    path.mkdir(parents=True)
    return path


def test_envs_with_nothing_known(invoke) -> None:
    result = invoke("envs")

    assert result.exit_code == 0, result.output
    assert "No environments known to envreg" in result.output


def test_envs_json_with_nothing_known(invoke) -> None:
    result = invoke("envs", "--json")

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"active": [], "inactive": []}


def test_scenario(invoke, tmp_path: Path) -> None:
    """Register a and b, activate a, list, then unregister b."""
    a_dir = _mkdir(tmp_path, "a")
    b_dir = _mkdir(tmp_path, "b")
    assert invoke("init", str(a_dir)).exit_code == 0
    assert invoke("init", str(b_dir)).exit_code == 0
    a = open_environment(a_dir)
    b = open_environment(b_dir)

    result = invoke("envs", "--json", active=[a])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "active": [{"name": "a", "path": str(a.path)}],
        "inactive": [{"name": "b", "path": str(b.path)}],
    }

    result = invoke("unregister", str(b_dir))
    assert result.exit_code == 0, result.output

    result = invoke("envs", "--json", active=[a])
    assert json.loads(result.stdout)["inactive"] == []


def test_envs_text_output(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    web_dir = _mkdir(tmp_path, "web")
    invoke("init", str(a_dir))
    invoke("init", str(web_dir))
    a = open_environment(a_dir)
    web = open_environment(web_dir)

    result = invoke("envs", active=[a])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "Active environments:",
        f"a  {a.path}",
        "Inactive environments:",
        f"web  {web.path}",
    ]


def test_envs_active_only(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    invoke("init", str(a_dir), "--name", "first")
    a = open_environment(a_dir)
    remote = RemoteEnvironment(owner="alice", name="tools")

    result = invoke("envs", "--active", active=[remote, a])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "Active environments:",
        "alice/tools  (remote)",
        f"first        {a.path}",
    ]


def test_envs_active_only_json(invoke, tmp_path: Path) -> None:
    remote = RemoteEnvironment(owner="alice", name="tools")

    result = invoke("envs", "--active", "--json", active=[remote])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"name": "alice/tools", "path": None}]


def test_envs_active_only_when_none_active(invoke) -> None:
    result = invoke("envs", "--active")

    assert result.exit_code == 0, result.output
    assert "No active environments" in result.output


def test_envs_skips_deleted_environments(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    gone_dir = _mkdir(tmp_path, "gone")
    invoke("init", str(a_dir))
    invoke("init", str(gone_dir))
    a = open_environment(a_dir)
    shutil.rmtree(gone_dir)

    result = invoke("envs", "--json")

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["inactive"] == [{"name": "a", "path": str(a.path)}]


def test_register_is_idempotent(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    invoke("init", str(a_dir))

    result = invoke("register", str(a_dir))

    assert result.exit_code == 0, result.output
    assert len(json.loads(invoke("envs", "--json").stdout)["inactive"]) == 1
    assert len(list((tmp_path / "cache" / "registered_environments").iterdir())) == 1


def test_register_without_descriptor_fails(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")

    result = invoke("register", str(a_dir))

    assert result.exit_code == 1
    assert "Could not decode" in result.output


def test_init_twice_fails(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    invoke("init", str(a_dir))

    result = invoke("init", str(a_dir))

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_unregister_twice(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    invoke("init", str(a_dir))

    assert invoke("unregister", str(a_dir)).exit_code == 0
    assert invoke("unregister", str(a_dir)).exit_code == 0
    assert json.loads(invoke("envs", "--json").stdout)["inactive"] == []


def test_unregister_by_key(invoke) -> None:
    result = invoke("unregister", "--key", "0" * 64)

    assert result.exit_code == 0, result.output


def test_delete(invoke, tmp_path: Path) -> None:
    a_dir = _mkdir(tmp_path, "a")
    invoke("init", str(a_dir))

    result = invoke("delete", str(a_dir))

    assert result.exit_code == 0, result.output
    assert not (a_dir / ".envreg").exists()
    assert a_dir.exists()
    assert json.loads(invoke("envs", "--json").stdout)["inactive"] == []


def test_broken_registry_is_an_error(invoke, tmp_path: Path) -> None:
    (tmp_path / "cache").mkdir()
    (tmp_path / "cache" / "registered_environments").write_text("not a directory")

    result = invoke("envs")

    assert result.exit_code == 1
    assert "registry" in result.output


def test_format_environments_pads_names() -> None:
    remote = RemoteEnvironment(owner="alice", name="tools")
    lines = format_environments([remote, RemoteEnvironment(owner="b", name="c")])

    assert lines == ["alice/tools  (remote)", "b/c          (remote)"]


def test_unregister_key_cannot_escape_registry(invoke, tmp_path: Path) -> None:
    victim = tmp_path / "victim.txt"
    victim.write_text("keep me")

    result = invoke("unregister", "--key", "../../victim.txt")

    assert result.exit_code == 0, result.output
    assert victim.exists()
