"""Per-user paths and persisted preferences.

Everything lives under the user's XDG config directory:

    ~/.config/umu-front/
        games.json       # the library (see library.py)
        settings.json    # UI preferences
        images/          # downloaded and resized cover art

settings.json schema::

    {
      "thumb_width": 150.0,
      "thumb_height": 225.0
    }
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from umufront.utils.files import atomic_write_text

log = logging.getLogger(__name__)

_APP_DIR = "umu-front"
_GAMES_FILE = "games.json"
_SETTINGS_FILE = "settings.json"
_IMAGES_DIR = "images"

# umu-run resolves PROTONPATH against Steam's per-user compat tools folder.
_COMPAT_TOOLS = Path(".steam") / "steam" / "compatibilitytools.d"


def config_dir() -> Path:
    """Return (and create if needed) the umu-front config directory."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    d = base / _APP_DIR
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


def images_dir() -> Path:
    """Return (and create if needed) the managed cover-art directory."""
    d = config_dir() / _IMAGES_DIR
    d.mkdir(mode=0o700, exist_ok=True)
    return d


def games_path() -> Path:
    """Return the library document path, creating both directories."""
    images_dir()
    return config_dir() / _GAMES_FILE


def compat_tools_dir() -> Path:
    """Return ``~/.steam/steam/compatibilitytools.d`` (not created)."""
    return Path.home() / _COMPAT_TOOLS


def _settings_path() -> Path:
    return config_dir() / _SETTINGS_FILE


# ---------------------------------------------------------------------------
# Low-level read/write
# ---------------------------------------------------------------------------

def _load() -> dict:
    path = _settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Could not read settings: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def _save(data: dict) -> None:
    atomic_write_text(
        _settings_path(),
        json.dumps(data, indent=2, ensure_ascii=False),
    )


# ---------------------------------------------------------------------------
# Thumbnail size helpers
# ---------------------------------------------------------------------------

# Grid cells keep the 2:3 portrait ratio of Steam library art.
DEFAULT_THUMB_SIZE: tuple[float, float] = (150.0, 225.0)
THUMB_ZOOM_STEP = 1.2


def load_thumb_size() -> tuple[float, float]:
    """Return the stored grid thumbnail ``(width, height)``."""
    cfg = _load()
    try:
        width = float(cfg.get("thumb_width", DEFAULT_THUMB_SIZE[0]))
        height = float(cfg.get("thumb_height", DEFAULT_THUMB_SIZE[1]))
    except (TypeError, ValueError):
        return DEFAULT_THUMB_SIZE
    if width <= 0 or height <= 0:
        return DEFAULT_THUMB_SIZE
    return width, height


def save_thumb_size(width: float, height: float) -> None:
    """Persist the grid thumbnail size, preserving other settings keys."""
    cfg = _load()
    cfg["thumb_width"] = float(width)
    cfg["thumb_height"] = float(height)
    _save(cfg)


def zoom_thumb_size(
    size: tuple[float, float], zoom_in: bool
) -> tuple[float, float]:
    """Scale *size* one zoom step up or down."""
    factor = THUMB_ZOOM_STEP if zoom_in else 1 / THUMB_ZOOM_STEP
    return size[0] * factor, size[1] * factor
