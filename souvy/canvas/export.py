from __future__ import annotations

import io
import asyncio
import logging
from typing import Iterable, List, Optional
from dataclasses import dataclass

import arabic_reshaper
from bidi.algorithm import get_display
from PIL import Image, ImageColor, ImageDraw

from souvy.canvas.fonts import FontsManager
from souvy.canvas.images import open_image
from souvy.canvas.object import CanvasElement, ElementType
from souvy.core.errors import AssetFetchError
from souvy.core.state import REFERENCE_DESIGN_WIDTH
from souvy.services.assets import AssetFetcher, encode_data_url

logger = logging.getLogger(__name__)

DEFAULT_TEXT_COLOR = (0, 0, 0, 255)
DEFAULT_FONT_SIZE = 20


@dataclass(frozen=True)
class RasterResult:
    """Encoded PNG of a finished export.

    An empty result (no bytes) means the base image could not be loaded; it
    is falsy so callers can treat it as a failure.
    """
    png: bytes = b""
    width: int = 0
    height: int = 0

    def __bool__(self) -> bool:
        return bool(self.png)

    def data_url(self) -> str:
        return encode_data_url(self.png) if self.png else ""


EMPTY_RESULT = RasterResult()


def _parse_color(value: Optional[str]) -> tuple:
    if not value:
        return DEFAULT_TEXT_COLOR
    try:
        rgb = ImageColor.getrgb(str(value).strip())
    except ValueError:
        logger.warning("Invalid text color %r, using black", value)
        return DEFAULT_TEXT_COLOR
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb


OBLIQUE_SLANT = 0.2


def _oblique(layer: Image.Image, cy: float, slant: float = OBLIQUE_SLANT) -> Image.Image:
    """Shear ``layer`` horizontally about the row ``cy`` so glyphs lean right."""
    return layer.transform(
        layer.size,
        Image.AFFINE,
        (1, slant, -slant * cy, 0, 1, 0),
        resample=Image.BICUBIC,
    )


def _shape_text(text: str) -> str:
    # Arabic/Hebrew need shaping and visual reordering before Pillow draws them
    return get_display(arabic_reshaper.reshape(text))


class RasterExporter:
    """Composite a product photo and design elements into one PNG.

    Elements are painted in ascending ``z_index`` order, one at a time: each
    image load finishes (or fails and is skipped) before the next element is
    drawn, so later elements always cover earlier ones. Concurrent calls to
    :meth:`export` are serialized.
    """

    def __init__(self, fetcher: AssetFetcher, fonts: Optional[FontsManager] = None) -> None:
        self.fetcher = fetcher
        self.fonts = fonts or FontsManager()
        self._lock = asyncio.Lock()

    async def export(self, base_image: str, elements: Iterable[CanvasElement]) -> RasterResult:
        async with self._lock:
            return await self._export(base_image, list(elements))

    async def _export(self, base_image: str, elements: List[CanvasElement]) -> RasterResult:
        try:
            base = open_image(await self.fetcher.fetch(base_image))
        except AssetFetchError as e:
            logger.warning("Export aborted, base image unavailable: %s", e)
            return EMPTY_RESULT

        surface = Image.new("RGBA", base.size, (0, 0, 0, 0))
        surface.alpha_composite(base, (0, 0))
        sw, sh = surface.size

        for el in sorted(elements, key=lambda e: e.z_index):
            cx = el.x / 100.0 * sw
            cy = el.y / 100.0 * sh
            w = el.width / 100.0 * sw
            h = el.height / 100.0 * sh
            if el.type == ElementType.IMAGE:
                await self._draw_image(surface, el, cx, cy, w, h)
            else:
                self._draw_text(surface, el, cx, cy)

        buf = io.BytesIO()
        surface.save(buf, format="PNG")
        logger.debug("Exported %dx%d with %d elements", sw, sh, len(elements))
        return RasterResult(png=buf.getvalue(), width=sw, height=sh)

    async def _draw_image(self, surface: Image.Image, el: CanvasElement, cx: float, cy: float, w: float, h: float) -> None:
        try:
            asset = open_image(await self.fetcher.fetch(el.content))
        except AssetFetchError as e:
            logger.warning("Skipping image element %s: %s", el.id, e)
            return
        w_px = int(round(w))
        h_px = int(round(h))
        if w_px < 1 or h_px < 1:
            return
        resized = asset.resize((w_px, h_px), Image.LANCZOS)
        left = int(round(cx - w / 2.0))
        top = int(round(cy - h / 2.0))
        # alpha_composite rejects negative offsets, so crop whatever hangs off the surface
        src_x = max(0, -left)
        src_y = max(0, -top)
        if src_x >= w_px or src_y >= h_px or left >= surface.width or top >= surface.height:
            return
        if src_x or src_y:
            resized = resized.crop((src_x, src_y, w_px, h_px))
        surface.alpha_composite(resized, (max(0, left), max(0, top)))

    def _draw_text(self, surface: Image.Image, el: CanvasElement, cx: float, cy: float) -> None:
        if not el.content:
            return
        size_px = float(el.font_size or DEFAULT_FONT_SIZE) * (surface.width / REFERENCE_DESIGN_WIDTH)
        font, faux_bold, faux_italic = self.fonts.bold_italic(el.font_family, size_px)
        fill = _parse_color(el.color)
        # Slanted text is drawn on its own layer, sheared, then composited
        target = Image.new("RGBA", surface.size, (0, 0, 0, 0)) if faux_italic else surface
        draw = ImageDraw.Draw(target, "RGBA")
        stroke = max(1, int(round(size_px / 30.0))) if faux_bold else 0
        draw.text(
            (cx, cy),
            _shape_text(el.content),
            font=font,
            fill=fill,
            anchor="mm",
            align="center",
            stroke_width=stroke,
            stroke_fill=fill,
        )
        if faux_italic:
            surface.alpha_composite(_oblique(target, cy))
