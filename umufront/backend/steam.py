"""Steam store lookups used to auto-fill new games.

Two best-effort calls, both blocking and meant for a background thread:

* :func:`search` queries the public store search endpoint by name and
  returns ``SearchResult(id, name)`` candidates.
* :func:`download_thumbnail` fetches cover art for an app id.  Candidate
  URLs are tried in order (portrait library art, then the wide header) and
  the first one that answers HTTP 200 wins.  A single ``SteamError`` is
  raised only after every candidate has failed.

Callers are expected to treat ``SteamError`` as non-fatal.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

from umufront.backend.config import images_dir

log = logging.getLogger(__name__)

_SEARCH_URL = "https://store.steampowered.com/api/storesearch/"
_CDN_URL = "https://steamcdn-a.akamaihd.net/steam/apps"

# A browser-like User-Agent avoids CDN bot rules that reject Python-urllib.
_USER_AGENT = "Mozilla/5.0 (compatible; umu-front/1.0)"


class SteamError(Exception):
    """Raised when a store search or thumbnail download fails."""


@dataclass(frozen=True, slots=True)
class SearchResult:
    id: int
    name: str


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def search(term: str, *, timeout: int = 15) -> list[SearchResult]:
    """Return store matches for *term*, best match first."""
    query = urlencode({"term": term, "l": "english", "cc": "US"})
    url = f"{_SEARCH_URL}?{query}"
    try:
        body = _get(url, timeout=timeout)
    except urllib.error.HTTPError as exc:
        raise SteamError(f"Steam search failed: HTTP {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise SteamError(f"Network error searching Steam: {exc.reason}") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise SteamError(f"Network error searching Steam: {exc!r}") from exc

    try:
        data = json.loads(body)
        items = data.get("items") or []
        return [SearchResult(id=int(item["id"]), name=str(item["name"])) for item in items]
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise SteamError(f"Unexpected Steam search response: {exc}") from exc


# ---------------------------------------------------------------------------
# Thumbnails
# ---------------------------------------------------------------------------

def thumbnail_urls(app_id: int) -> list[str]:
    """Return candidate cover-art URLs for *app_id*, preferred first."""
    return [
        f"{_CDN_URL}/{app_id}/library_600x900.jpg",
        f"{_CDN_URL}/{app_id}/header.jpg",
    ]


def thumbnail_path(app_id: int) -> Path:
    """Return where search-derived art for *app_id* is stored."""
    return images_dir() / f"{app_id}.jpg"


def download_thumbnail(app_id: int, dest: Path, *, timeout: int = 30) -> Path:
    """Download the first available cover art for *app_id* to *dest*."""
    for url in thumbnail_urls(app_id):
        try:
            body = _get(url, timeout=timeout)
        except (OSError, http.client.HTTPException) as exc:
            log.debug("Thumbnail candidate %s failed: %s", url, exc)
            continue
        try:
            dest.write_bytes(body)
        except OSError as exc:
            dest.unlink(missing_ok=True)
            log.debug("Could not write %s: %s", dest, exc)
            continue
        return dest
    raise SteamError(f"Failed to download thumbnail for app {app_id}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _get(url: str, *, timeout: int) -> bytes:
    """GET *url* and return the body; anything but HTTP 200 is an error."""
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})  # noqa: S310
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        if resp.status != 200:
            raise urllib.error.HTTPError(url, resp.status, resp.reason, resp.headers, None)
        return resp.read()
