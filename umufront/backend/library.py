"""Load and save the game library.

The whole library is a single pretty-printed JSON array at
``~/.config/umu-front/games.json``::

    [
      {
        "id": "440",
        "name": "Team Fortress 2",
        "exec_path": "/games/tf2/hl2.exe",
        "prefix": "/home/me/.wine440",
        "proton_ver": "Proton 9.0-3",
        "image_url": "/home/me/.config/umu-front/images/440.jpg",
        "dll_overrides": "d3d11=n,b"
      }
    ]

Array order is display order.  Every save rewrites the entire document;
writes go to a temp file in the same directory and are moved into place
with ``os.replace`` so a reader never sees a half-written file.

A missing document is a first run and loads as an empty library.  Anything
else that prevents a clean load raises ``LibraryError``: callers must not
treat that as "empty", or the next save would wipe the user's library.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from umufront.backend.config import games_path
from umufront.models.game import Game
from umufront.utils.files import atomic_write_text

log = logging.getLogger(__name__)


class LibraryError(Exception):
    """Raised when the library document cannot be read, parsed or written."""


def load_games(path: Path | None = None) -> list[Game]:
    """Return the stored games in display order.

    Raises ``LibraryError`` if the file exists but cannot be read or does
    not hold a valid array of game objects.
    """
    path = path or games_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise LibraryError(f"Could not read {path}: {exc}") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LibraryError(f"{path} is not valid JSON: {exc}") from exc

    # Older builds wrote ``null`` for an empty library.
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise LibraryError(
            f"{path} must contain a JSON array, got {type(raw).__name__}"
        )

    games: list[Game] = []
    for i, item in enumerate(raw):
        try:
            games.append(Game.from_dict(item))
        except (TypeError, ValueError) as exc:
            raise LibraryError(f"Invalid game entry #{i} in {path}: {exc}") from exc
    return games


def save_games(games: Iterable[Game], path: Path | None = None) -> None:
    """Atomically replace the library document with *games*."""
    path = path or games_path()
    text = dumps_games(games)
    try:
        atomic_write_text(path, text)
    except OSError as exc:
        raise LibraryError(f"Could not write {path}: {exc}") from exc
    log.debug("Saved %s", path)


def dumps_games(games: Iterable[Game]) -> str:
    """Render *games* exactly as ``save_games`` writes them."""
    return json.dumps(
        [g.to_dict() for g in games], indent=2, ensure_ascii=False
    ) + "\n"
