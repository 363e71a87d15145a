from __future__ import annotations

import json
import logging
import functools
from pathlib import Path
from typing import Optional, Tuple

from PIL import ImageFont

from souvy.core.state import FONTS_PATH

logger = logging.getLogger(__name__)

DEFAULT_FAMILY = "serif"
BOLD_ITALIC_SUFFIXES = (" Bold Italic", " BoldItalic", "-BoldItalic")


class FontsManager:
    """Resolve a font family name to a Pillow font at a pixel size.

    ``fonts.json`` in the fonts directory maps family names to file stems,
    e.g. ``{"Playfair Display Bold Italic": "PlayfairDisplay-BoldItalic"}``.
    Bold-italic faces are preferred; when only a regular face is found the
    caller is told to embolden and slant it. Pillow's built-in font is the last resort.
    """

    def __init__(self, fonts_path: Path = FONTS_PATH) -> None:
        self.fonts_path = Path(fonts_path)
        self._fonts_map = self._load_fonts_map()

    def _load_fonts_map(self) -> dict:
        mp_path = self.fonts_path / "fonts.json"
        if not mp_path.exists():
            return {}
        try:
            with open(mp_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Failed to read fonts map %s", mp_path)
            return {}
        return data if isinstance(data, dict) else {}

    def font_path_for_family(self, family: str) -> Optional[str]:
        stem = self._fonts_map.get(family)
        if not stem:
            return None
        for ext in (".ttf", ".otf"):
            candidate = self.fonts_path / f"{stem}{ext}"
            if candidate.exists():
                return str(candidate)
        return None

    def bold_italic(self, family: Optional[str], size_px: float) -> Tuple[ImageFont.ImageFont, bool, bool]:
        """Return ``(font, needs_faux_bold, needs_faux_italic)`` for ``family``."""
        return _resolve(self, family or DEFAULT_FAMILY, max(1, int(round(size_px))))


@functools.lru_cache(maxsize=64)
def _resolve(manager: FontsManager, family: str, size_px: int):
    for suffix in BOLD_ITALIC_SUFFIXES:
        path = manager.font_path_for_family(family + suffix)
        if path:
            return ImageFont.truetype(path, size_px), False, False
    path = manager.font_path_for_family(family)
    if path:
        return ImageFont.truetype(path, size_px), True, True
    # Installed system fonts by name
    for name in (f"{family} Bold Italic", family):
        try:
            regular = name == family
            return ImageFont.truetype(name, size_px), regular, regular
        except OSError:
            continue
    logger.debug("No font file for %r, using Pillow default", family)
    return ImageFont.load_default(size=size_px), True, True
