"""Tests for umufront/backend/launcher.py."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from umufront.backend import launcher as la
from umufront.backend.launcher import LaunchError
from umufront.models.game import Game

_BASE_ENV = {"PATH": "/usr/bin", "HOME": "/home/u"}


def _game(**kwargs) -> Game:
    defaults = dict(name="Test Game", exec_path="/games/test/game.exe")
    defaults.update(kwargs)
    return Game(**defaults)


# ---------------------------------------------------------------------------
# build_env
# ---------------------------------------------------------------------------

def test_build_env_full_record():
    game = _game(
        id="440",
        proton_ver="Proton 9.0-3",
        prefix="/home/u/.wine440",
        dll_overrides="d3d11=n,b",
    )
    with patch.object(Path, "home", return_value=Path("/home/u")):
        env = la.build_env(game, _BASE_ENV)
    assert env["GAMEID"] == "umu-440"
    assert env["STORE"] == "steam"
    assert env["WINEPREFIX"] == "/home/u/.wine440"
    assert env["WINEDLLOVERRIDES"] == "d3d11=n,b"
    assert env["PROTONPATH"] == "/home/u/.steam/steam/compatibilitytools.d/Proton 9.0-3"


def test_build_env_empty_fields_add_nothing():
    assert la.build_env(_game(), _BASE_ENV) == _BASE_ENV


def test_build_env_inherits_base_env():
    env = la.build_env(_game(prefix="/pfx"), _BASE_ENV)
    assert env["PATH"] == "/usr/bin"
    assert env["HOME"] == "/home/u"


def test_build_env_does_not_modify_base():
    base = dict(_BASE_ENV)
    la.build_env(_game(id="1", prefix="/pfx"), base)
    assert base == _BASE_ENV


def test_build_env_defaults_to_process_environment():
    with patch.dict(os.environ, {"UMU_FRONT_TEST_MARKER": "yes"}):
        env = la.build_env(_game())
    assert env["UMU_FRONT_TEST_MARKER"] == "yes"


def test_build_env_id_without_proton():
    env = la.build_env(_game(id="570"), _BASE_ENV)
    assert env["GAMEID"] == "umu-570"
    assert env["STORE"] == "steam"
    assert "PROTONPATH" not in env


def test_build_env_dll_overrides_passed_verbatim():
    raw = "  d3d9,dxgi = n ; winmm=b  "
    env = la.build_env(_game(dll_overrides=raw), _BASE_ENV)
    assert env["WINEDLLOVERRIDES"] == raw


def test_build_env_overrides_inherited_values():
    base = dict(_BASE_ENV, WINEPREFIX="/old")
    env = la.build_env(_game(prefix="/new"), base)
    assert env["WINEPREFIX"] == "/new"


def test_proton_path_not_validated(tmp_path):
    with patch.object(la, "compat_tools_dir", return_value=tmp_path):
        assert la.proton_path("Does Not Exist") == tmp_path / "Does Not Exist"


# ---------------------------------------------------------------------------
# build_launch
# ---------------------------------------------------------------------------

def test_build_launch_runs_umu_run_with_exec_path():
    spec = la.build_launch(_game(exec_path="/g/My Game.exe"), _BASE_ENV)
    assert spec.cmd == ["umu-run", "/g/My Game.exe"]
    assert spec.env == _BASE_ENV


# ---------------------------------------------------------------------------
# launch_game
# ---------------------------------------------------------------------------

def test_launch_game_spawns_detached():
    proc = MagicMock()
    with patch("subprocess.Popen", return_value=proc) as popen:
        result = la.launch_game(_game(id="440"))
    assert result is proc
    args, kwargs = popen.call_args
    assert args[0] == ["umu-run", "/games/test/game.exe"]
    assert kwargs["env"]["GAMEID"] == "umu-440"
    assert kwargs["start_new_session"] is True
    # stdout/stderr are inherited, not captured.
    assert "stdout" not in kwargs
    assert "stderr" not in kwargs
    proc.wait.assert_not_called()


def test_launch_game_runner_missing_raises():
    with patch("subprocess.Popen", side_effect=FileNotFoundError("umu-run")):
        with pytest.raises(LaunchError, match="not found"):
            la.launch_game(_game())


def test_launch_game_spawn_failure_raises():
    with patch("subprocess.Popen", side_effect=PermissionError("denied")):
        with pytest.raises(LaunchError, match="denied"):
            la.launch_game(_game())


def test_launch_game_without_exec_path_raises():
    with patch("subprocess.Popen") as popen:
        with pytest.raises(LaunchError):
            la.launch_game(_game(exec_path=""))
    popen.assert_not_called()


# ---------------------------------------------------------------------------
# list_proton_versions
# ---------------------------------------------------------------------------

def test_proton_versions_lists_directories(tmp_path):
    (tmp_path / "GE-Proton9-20").mkdir()
    (tmp_path / "Proton 9.0-3").mkdir()
    (tmp_path / "readme.txt").write_text("not a tool")
    with patch.object(la, "compat_tools_dir", return_value=tmp_path):
        assert la.list_proton_versions() == ["GE-Proton9-20", "Proton 9.0-3"]


def test_proton_versions_fallback_when_missing(tmp_path):
    with patch.object(la, "compat_tools_dir", return_value=tmp_path / "nope"):
        assert la.list_proton_versions() == ["Proton Experimental", "Proton 9.0-3"]


def test_proton_versions_fallback_when_empty(tmp_path):
    (tmp_path / "stray-file").write_text("")
    with patch.object(la, "compat_tools_dir", return_value=tmp_path):
        assert la.list_proton_versions() == ["Proton Experimental", "Proton 9.0-3"]
