"""The in-memory game library and the only path that mutates it.

``GameCollection`` owns the ordered list of games and the grid selection.
Every mutation rewrites ``games.json`` immediately, so there is never any
uncommitted state for the UI to track.

Games are addressed by position, not by ``id``: duplicate names and ids are
allowed, and the index always comes from the list the UI is displaying.
Passing an out-of-range index is a caller bug and raises ``IndexError``.

Adding a game
-------------
``prepare_game()`` does the slow enrichment work (custom image resize,
Steam search, thumbnail download) and is meant to run on a background
thread via ``utils.tasks.run_in_background``.  The resulting ``Game`` is
then handed to ``add()`` on the main loop.  Enrichment failures are logged
and leave ``id`` / ``image_url`` empty; they never stop the game from
being added.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from umufront.backend import steam
from umufront.backend.library import load_games, save_games
from umufront.models.game import Game
from umufront.utils.image import ImageError, is_managed_image, process_custom_image

log = logging.getLogger(__name__)


class Cancelled(Exception):
    """Raised when a background enrichment is cancelled via *cancel_event*."""


def renumber_selection(selected: int | None, deleted: int) -> int | None:
    """Return where *selected* points after the game at *deleted* is removed."""
    if selected is None or selected == deleted:
        return None
    if selected > deleted:
        return selected - 1
    return selected


class GameCollection:
    """Ordered game library plus the current selection."""

    def __init__(self, games: list[Game] | None = None, *, path: Path | None = None) -> None:
        self._games: list[Game] = list(games) if games else []
        self._path = path
        self.selected: int | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> "GameCollection":
        """Build a collection from disk.  ``LibraryError`` propagates."""
        return cls(load_games(path), path=path)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def games(self) -> tuple[Game, ...]:
        return tuple(self._games)

    def __len__(self) -> int:
        return len(self._games)

    def __getitem__(self, index: int) -> Game:
        self._check_index(index)
        return self._games[index]

    @property
    def selected_game(self) -> Game | None:
        if self.selected is None:
            return None
        return self._games[self.selected]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def select(self, index: int | None) -> None:
        if index is not None:
            self._check_index(index)
        self.selected = index

    def add(self, game: Game) -> int:
        """Append *game*, save, and return its index."""
        self._games.append(game)
        self._save()
        log.info("Added %s", game.name)
        return len(self._games) - 1

    def edit(
        self,
        index: int,
        *,
        name: str,
        exec_path: str,
        prefix: str,
        proton_ver: str,
        image_url: str,
        dll_overrides: str,
    ) -> Game:
        """Overwrite every field of the game at *index* and save.

        A new external *image_url* is resized into the images directory
        first.  If that fails the previous image is kept.
        """
        self._check_index(index)
        game = self._games[index]

        if (
            image_url
            and image_url != game.image_url
            and not is_managed_image(image_url)
        ):
            try:
                image_url = str(process_custom_image(image_url))
            except ImageError as exc:
                log.warning("Error processing image: %s", exc)
                image_url = game.image_url

        game.name = name
        game.exec_path = exec_path
        game.prefix = prefix
        game.proton_ver = proton_ver
        game.image_url = image_url
        game.dll_overrides = dll_overrides
        self._save()
        return game

    def delete(self, index: int) -> Game:
        """Remove the game at *index*, fix up the selection, and save."""
        self._check_index(index)
        game = self._games.pop(index)
        self.selected = renumber_selection(self.selected, index)
        self._save()
        log.info("Deleted %s", game.name)
        return game

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._games):
            raise IndexError(f"Game index {index} out of range (0..{len(self._games) - 1})")

    def _save(self) -> None:
        save_games(self._games, self._path)


# ---------------------------------------------------------------------------
# Add-flow enrichment
# ---------------------------------------------------------------------------

def prepare_game(
    name: str,
    exec_path: str,
    prefix: str = "",
    proton_ver: str = "",
    custom_image: str = "",
    dll_overrides: str = "",
    *,
    cancel_event: threading.Event | None = None,
) -> Game:
    """Build a new ``Game``, filling ``id`` and ``image_url`` where possible.

    Blocking; run it on a background thread.  Steps:

    1. Resize *custom_image* into the images directory, if given.
    2. Search Steam for *name*; the first hit supplies ``id`` so umu can
       apply its per-game fixes even when the user picked their own art.
    3. With no image yet, download the first hit's cover art.
    """
    image_path = ""
    game_id = ""

    if custom_image:
        _check_cancel(cancel_event)
        try:
            image_path = str(process_custom_image(custom_image))
        except ImageError as exc:
            log.warning("Error processing custom image: %s", exc)

    _check_cancel(cancel_event)
    try:
        results = steam.search(name)
    except steam.SteamError as exc:
        log.warning("Steam search for %r failed: %s", name, exc)
        results = []

    if results:
        hit = results[0]
        game_id = str(hit.id)
        if not image_path:
            _check_cancel(cancel_event)
            try:
                image_path = str(steam.download_thumbnail(hit.id, steam.thumbnail_path(hit.id)))
            except steam.SteamError as exc:
                log.warning("%s", exc)

    return Game(
        id=game_id,
        name=name,
        exec_path=exec_path,
        prefix=prefix,
        proton_ver=proton_ver,
        image_url=image_path,
        dll_overrides=dll_overrides,
    )


def _check_cancel(cancel_event: threading.Event | None) -> None:
    if cancel_event and cancel_event.is_set():
        raise Cancelled("Cancelled")
