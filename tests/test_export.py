import asyncio
import io

from PIL import Image, ImageChops, ImageDraw

from conftest import FakeFetcher, make_png
from souvy.canvas.export import RasterExporter, RasterResult, _oblique, _parse_color
from souvy.canvas.fonts import FontsManager
from souvy.canvas.object import CanvasElement

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def decode(result: RasterResult) -> Image.Image:
    return Image.open(io.BytesIO(result.png)).convert("RGBA")


def close_to(pixel, expected, tol=2):
    return all(abs(a - b) <= tol for a, b in zip(pixel, expected))


def image_element(eid, content, z, **kwargs):
    kwargs.setdefault("width", 50)
    kwargs.setdefault("height", 50)
    return CanvasElement(id=eid, type="image", content=content, z_index=z, **kwargs)


def test_empty_design_matches_base_dimensions(exporter):
    result = asyncio.run(exporter.export("base.png", []))
    assert result
    assert (result.width, result.height) == (120, 80)
    assert decode(result).size == (120, 80)
    assert result.data_url().startswith("data:image/png;base64,")


def test_higher_z_covers_lower_z(tmp_path):
    fetcher = FakeFetcher({
        "base.png": make_png((120, 80)),
        "red.png": make_png((10, 10), RED),
        "blue.png": make_png((10, 10), BLUE),
    })
    exporter = RasterExporter(fetcher, fonts=FontsManager(tmp_path))
    # listed top-first to show order comes from z_index, not list position
    elements = [
        image_element("top", "blue.png", 1),
        image_element("bottom", "red.png", 0),
    ]
    result = asyncio.run(exporter.export("base.png", elements))
    assert close_to(decode(result).getpixel((60, 40)), BLUE)
    assert fetcher.calls == ["base.png", "red.png", "blue.png"]


def test_base_failure_returns_empty_result(tmp_path):
    exporter = RasterExporter(FakeFetcher(), fonts=FontsManager(tmp_path))
    result = asyncio.run(exporter.export("missing.png", []))
    assert not result
    assert result.png == b""
    assert result.data_url() == ""


def test_unloadable_image_element_is_skipped(tmp_path):
    fetcher = FakeFetcher({
        "base.png": make_png((120, 80)),
        "red.png": make_png((10, 10), RED),
    })
    exporter = RasterExporter(fetcher, fonts=FontsManager(tmp_path))
    elements = [
        image_element("ok", "red.png", 0, x=25, y=50, width=20, height=20),
        image_element("broken", "gone.png", 1, x=75, y=50, width=20, height=20),
    ]
    img = decode(asyncio.run(exporter.export("base.png", elements)))
    assert close_to(img.getpixel((30, 40)), RED)
    assert img.getpixel((90, 40)) == (255, 255, 255, 255)


def test_image_hanging_off_the_edge_is_cropped(tmp_path):
    fetcher = FakeFetcher({
        "base.png": make_png((120, 80)),
        "red.png": make_png((10, 10), RED),
    })
    exporter = RasterExporter(fetcher, fonts=FontsManager(tmp_path))
    elements = [image_element("corner", "red.png", 0, x=0, y=0, width=20, height=20)]
    img = decode(asyncio.run(exporter.export("base.png", elements)))
    assert close_to(img.getpixel((1, 1)), RED)
    assert img.getpixel((60, 40)) == (255, 255, 255, 255)


def test_text_is_painted(exporter):
    text = CanvasElement(
        id="t", type="text", content="HELLO", x=50, y=50, width=80, height=30,
        font_size=200, font_family="Playfair Display", color="#ff0000",
    )
    img = decode(asyncio.run(exporter.export("base.png", [text])))
    colors = {rgba for _count, rgba in img.getcolors(maxcolors=120 * 80)}
    assert colors != {(255, 255, 255, 255)}


def test_parse_color():
    assert _parse_color("#004D4D") == (0, 77, 77, 255)
    assert _parse_color(None) == (0, 0, 0, 255)
    assert _parse_color("not-a-color") == (0, 0, 0, 255)


class RecordingFetcher(FakeFetcher):
    """Logs when each fetch starts and ends, yielding to the loop in between."""

    def __init__(self, assets=None):
        super().__init__(assets)
        self.events = []

    async def fetch(self, url: str) -> bytes:
        self.events.append(("start", url))
        await asyncio.sleep(0.01)
        self.events.append(("end", url))
        return await super().fetch(url)


def test_concurrent_exports_do_not_interleave(tmp_path):
    fetcher = RecordingFetcher({
        "a.png": make_png((40, 40)),
        "b.png": make_png((40, 40)),
        "red.png": make_png((10, 10), RED),
    })
    exporter = RasterExporter(fetcher, fonts=FontsManager(tmp_path))

    async def both():
        return await asyncio.gather(
            exporter.export("a.png", [image_element("x", "red.png", 0)]),
            exporter.export("b.png", [image_element("y", "red.png", 0)]),
        )

    first, second = asyncio.run(both())
    assert first and second
    assert fetcher.events == [
        ("start", "a.png"), ("end", "a.png"),
        ("start", "red.png"), ("end", "red.png"),
        ("start", "b.png"), ("end", "b.png"),
        ("start", "red.png"), ("end", "red.png"),
    ]


def inked_height(result: RasterResult) -> int:
    img = decode(result).convert("RGB")
    blank = Image.new("RGB", img.size, (255, 255, 255))
    _left, top, _right, bottom = ImageChops.difference(img, blank).getbbox()
    return bottom - top


def test_font_size_scales_with_surface_width(tmp_path):
    fetcher = FakeFetcher({
        "narrow.png": make_png((600, 300)),
        "wide.png": make_png((1200, 600)),
    })
    exporter = RasterExporter(fetcher, fonts=FontsManager(tmp_path))
    text = CanvasElement(
        id="t", type="text", content="HH", x=50, y=50, width=50, height=20,
        font_size=60, font_family="No Such Family", color="#000000",
    )
    small = inked_height(asyncio.run(exporter.export("narrow.png", [text])))
    large = inked_height(asyncio.run(exporter.export("wide.png", [text])))
    assert 1.6 <= large / small <= 2.4


def test_oblique_leans_right_about_center_row():
    layer = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    ImageDraw.Draw(layer).rectangle((48, 10, 52, 90), fill=RED)
    slanted = _oblique(layer, cy=50)

    def ink_columns(row):
        return [x for x in range(100) if slanted.getpixel((x, row))[3] > 128]

    top, middle, bottom = ink_columns(15), ink_columns(50), ink_columns(85)
    assert min(middle) >= 47 and max(middle) <= 53
    assert min(top) > max(middle)
    assert max(bottom) < min(middle)


def test_missing_face_asks_for_faux_bold_and_italic(tmp_path):
    _font, faux_bold, faux_italic = FontsManager(tmp_path).bold_italic("No Such Family", 24)
    assert faux_bold and faux_italic
