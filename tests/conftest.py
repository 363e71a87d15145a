import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))

from souvy.canvas.fonts import FontsManager
from souvy.canvas.export import RasterExporter
from souvy.canvas.object import Product
from souvy.canvas.selection import CanvasGeometry, InteractionController
from souvy.canvas.store import ElementStore
from souvy.core.errors import AssetFetchError
from souvy.core.state import Settings


def make_png(size=(100, 100), color=(255, 255, 255, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeFetcher:
    """In-memory asset source; unknown urls fail like a network error."""

    def __init__(self, assets=None):
        self.assets = dict(assets or {})
        self.calls = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.assets:
            raise AssetFetchError(f"Network error fetching {url}")
        return self.assets[url]


@pytest.fixture(scope="session", autouse=True)
def patch_filedialog():
    with patch("tkinter.filedialog.askopenfilename", return_value=""):
        yield


@pytest.fixture
def store():
    return ElementStore()


@pytest.fixture
def controller(store):
    # 200x100 px surface: 1% of width = 2px, 1% of height = 1px
    return InteractionController(store, CanvasGeometry(200, 100))


@pytest.fixture
def fetcher():
    return FakeFetcher({"base.png": make_png((120, 80))})


@pytest.fixture
def exporter(fetcher, tmp_path):
    return RasterExporter(fetcher, fonts=FontsManager(tmp_path))


@pytest.fixture
def product():
    return Product(id="mug-01", name="Ceramic Mug", category="Home", price=20, image="base.png")


@pytest.fixture
def settings():
    return Settings(anthropic_api_key="test-key")
