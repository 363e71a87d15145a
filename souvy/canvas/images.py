from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from souvy.core.errors import AssetFetchError

logger = logging.getLogger(__name__)


def open_image(data: bytes) -> Image.Image:
    """Decode raw bytes into an RGBA Pillow image.

    Raises:
        AssetFetchError: if the bytes are not a readable image.
    """
    if not data:
        raise AssetFetchError("Empty image data")
    try:
        pil = Image.open(io.BytesIO(data))
        pil.load()
    except (UnidentifiedImageError, OSError) as e:
        raise AssetFetchError(f"Cannot decode image: {e}") from e
    if pil.mode != "RGBA":
        pil = pil.convert("RGBA")
    return pil


def fit_image(pil: Image.Image, w_px: int, h_px: int) -> Optional[Image.Image]:
    """Resize to exactly ``(w_px, h_px)``; None for degenerate boxes."""
    if w_px < 1 or h_px < 1:
        return None
    return pil.resize((int(w_px), int(h_px)), Image.LANCZOS)


def render_photo(pil: Image.Image, w_px: int, h_px: int):
    """Return an ImageTk.PhotoImage of ``pil`` scaled to the box.

    The caller must keep a reference to the result to prevent it from being
    garbage-collected by Tkinter.
    """
    from PIL import ImageTk

    resized = fit_image(pil, w_px, h_px)
    if resized is None:
        return None
    try:
        return ImageTk.PhotoImage(resized)
    except Exception:
        logger.exception("Failed to build PhotoImage (%dx%d)", w_px, h_px)
        return None
