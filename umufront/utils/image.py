"""Cover-art processing for user-supplied images.

Custom images are normalised to the 600 × 900 portrait size used by Steam
library art so the grid renders every cover the same way.  Scaling uses
``GdkPixbuf.InterpType.HYPER`` (high-quality bicubic/Gaussian), which stays
sharp for the large ratios typical of screenshots and box scans.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from umufront.backend.config import images_dir

log = logging.getLogger(__name__)

COVER_SIZE = (600, 900)
_JPEG_QUALITY = "90"


class ImageError(Exception):
    """Raised when an image cannot be decoded, scaled or written."""


def is_managed_image(path: str) -> bool:
    """Return True if *path* sits directly in the managed images directory."""
    if not path:
        return False
    return Path(path).parent == images_dir()


def process_custom_image(src: str) -> Path:
    """Resize *src* to :data:`COVER_SIZE` and store it as a new JPEG.

    The output is ``custom_<ns timestamp>.jpg`` in the images directory.
    Returns the new path.
    """
    import gi

    gi.require_version("GdkPixbuf", "2.0")
    from gi.repository import GdkPixbuf, GLib

    dest = images_dir() / f"custom_{time.time_ns()}.jpg"
    try:
        pixbuf = GdkPixbuf.Pixbuf.new_from_file(src)
        width, height = COVER_SIZE
        scaled = pixbuf.scale_simple(width, height, GdkPixbuf.InterpType.HYPER)
        if scaled is None:
            raise ImageError(f"Could not scale {src}")
        scaled.savev(str(dest), "jpeg", ["quality"], [_JPEG_QUALITY])
    except GLib.Error as exc:
        dest.unlink(missing_ok=True)
        raise ImageError(f"Could not process {src}: {exc.message}") from exc
    log.debug("Processed %s -> %s", src, dest)
    return dest
