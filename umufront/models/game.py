"""A single launchable game in the user's library.

Each ``Game`` carries the launch parameters that ``launcher.build_env()``
turns into a ``umu-run`` environment.  The ``games.json`` document in the
config directory holds an ordered array of these records; array order is
grid display order.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Game:
    """One library entry.

    Only ``name`` and ``exec_path`` are needed for a usable entry; every
    other field treats the empty string as "not set / runner default".
    Records are mutable so the edit flow can overwrite fields in place.
    """

    name: str
    exec_path: str
    id: str = ""              # Steam app id, decimal string
    prefix: str = ""          # WINEPREFIX
    proton_ver: str = ""      # directory name under compatibilitytools.d
    image_url: str = ""       # local path, despite the name
    dll_overrides: str = ""   # passed through as WINEDLLOVERRIDES

    @property
    def steam_app_id(self) -> int | None:
        """Return ``id`` as an int, or ``None`` if unset or not numeric."""
        try:
            return int(self.id) if self.id else None
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> "Game":
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            exec_path=_str_field(data, "exec_path"),
            prefix=_str_field(data, "prefix"),
            proton_ver=_str_field(data, "proton_ver"),
            image_url=_str_field(data, "image_url"),
            dll_overrides=_str_field(data, "dll_overrides"),
        )

    def to_dict(self) -> dict:
        """Serialise to a ``games.json``-compatible dict.

        The six core keys are always written; ``dll_overrides`` is omitted
        when empty.
        """
        d: dict = {
            "id": self.id,
            "name": self.name,
            "exec_path": self.exec_path,
            "prefix": self.prefix,
            "proton_ver": self.proton_ver,
            "image_url": self.image_url,
        }
        if self.dll_overrides:
            d["dll_overrides"] = self.dll_overrides
        return d


def _str_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string, got {value!r}")
    return value
