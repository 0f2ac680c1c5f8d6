"""Build and spawn ``umu-run`` invocations for a game.

Environment contract
--------------------
``umu-run`` takes the guest executable as its only positional argument and
reads everything else from the environment.  Starting from the current
process environment, each non-empty ``Game`` field adds:

=================  ==========================================================
``prefix``         ``WINEPREFIX=<prefix>``
``proton_ver``     ``PROTONPATH=~/.steam/steam/compatibilitytools.d/<ver>``
``id``             ``GAMEID=umu-<id>`` and ``STORE=steam``
``dll_overrides``  ``WINEDLLOVERRIDES=<dll_overrides>`` (verbatim)
=================  ==========================================================

``PROTONPATH`` is not checked for existence; a bad version only shows up
when ``umu-run`` itself fails.

The child is started in its own session and never waited on.  It inherits
our stdout/stderr so ``umu-run`` diagnostics stay visible in the terminal.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from umufront.backend.config import compat_tools_dir
from umufront.models.game import Game

log = logging.getLogger(__name__)

RUNNER = "umu-run"
STORE = "steam"
GAMEID_PREFIX = "umu-"

# Offered when no compatibility tools are installed so the version picker
# is never empty.
FALLBACK_PROTON_VERSIONS = ("Proton Experimental", "Proton 9.0-3")


class LaunchError(Exception):
    """Raised when a game cannot be started."""


@dataclass
class LaunchSpec:
    """A fully-resolved runner invocation."""

    cmd: list[str]           # [RUNNER, exec_path]
    env: dict[str, str]      # complete child environment


def proton_path(proton_ver: str) -> Path:
    """Resolve a compat-tool directory name to its absolute path."""
    return compat_tools_dir() / proton_ver


def build_env(
    game: Game,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the child environment for *game*.

    *base_env* defaults to ``os.environ``; it is copied, never modified.
    """
    env = dict(os.environ if base_env is None else base_env)
    if game.prefix:
        env["WINEPREFIX"] = game.prefix
    if game.proton_ver:
        env["PROTONPATH"] = str(proton_path(game.proton_ver))
    if game.id:
        env["GAMEID"] = GAMEID_PREFIX + game.id
        env["STORE"] = STORE
    if game.dll_overrides:
        env["WINEDLLOVERRIDES"] = game.dll_overrides
    return env


def build_launch(
    game: Game,
    base_env: Mapping[str, str] | None = None,
) -> LaunchSpec:
    return LaunchSpec(cmd=[RUNNER, game.exec_path], env=build_env(game, base_env))


def launch_game(game: Game) -> subprocess.Popen:
    """Start *game* under ``umu-run`` and return without waiting.

    Raises ``LaunchError`` if the game has no executable or the runner
    cannot be spawned.  The returned ``Popen`` is not tracked further.
    """
    if not game.exec_path:
        raise LaunchError(f"{game.name or 'Game'} has no executable set")

    spec = build_launch(game)
    log.info("Launching %s", game.name)
    log.debug("Command: %s", spec.cmd)
    try:
        return subprocess.Popen(
            spec.cmd,
            env=spec.env,
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except FileNotFoundError as exc:
        raise LaunchError(f"{RUNNER} not found ({RUNNER!r} is not on PATH)") from exc
    except OSError as exc:
        raise LaunchError(f"Could not start {RUNNER}: {exc}") from exc


def list_proton_versions() -> list[str]:
    """Return installed compatibility tool names, sorted.

    Falls back to :data:`FALLBACK_PROTON_VERSIONS` when the directory is
    missing, unreadable, or holds no sub-directories.
    """
    tools = compat_tools_dir()
    try:
        versions = sorted(p.name for p in tools.iterdir() if p.is_dir())
    except OSError as exc:
        log.debug("No compatibility tools at %s: %s", tools, exc)
        versions = []
    return versions or list(FALLBACK_PROTON_VERSIONS)
