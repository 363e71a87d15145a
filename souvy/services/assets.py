from __future__ import annotations

import base64
import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote, unquote_to_bytes

import requests

from souvy.core.errors import AssetFetchError

logger = logging.getLogger(__name__)


def is_data_url(ref: str) -> bool:
    return str(ref or "").startswith("data:")


def decode_data_url(ref: str) -> bytes:
    """Return the payload of a ``data:`` URL.

    Supports both base64 and percent-encoded payloads. Raises
    AssetFetchError for malformed input.
    """
    try:
        header, payload = str(ref).split(",", 1)
    except ValueError as e:
        raise AssetFetchError(f"Malformed data URL: {str(ref)[:40]}") from e
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return unquote_to_bytes(payload)
    except ValueError as e:
        raise AssetFetchError("Failed to decode data URL payload") from e


def encode_data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


class AssetFetcher(Protocol):
    async def fetch(self, url: str) -> bytes:
        """Return the bytes behind ``url`` or raise AssetFetchError."""
        ...


class HttpAssetFetcher:
    """Load image bytes from data URLs, local files, or http(s) URLs.

    Remote URLs may be routed through a proxy so pixels of cross-origin
    images can be read; ``proxy`` is a template containing ``{url}`` which is
    replaced by the percent-encoded target URL. Blocking HTTP calls run in a
    worker thread so the event loop stays responsive.
    """

    def __init__(
        self,
        proxy: str = "",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.proxy = proxy or ""
        self.timeout = float(timeout)
        self._session = session or requests.Session()

    def resolve_url(self, url: str) -> str:
        if self.proxy and url.startswith(("http://", "https://")):
            return self.proxy.replace("{url}", quote(url, safe=""))
        return url

    async def fetch(self, url: str) -> bytes:
        if not url:
            raise AssetFetchError("Empty asset reference")
        if is_data_url(url):
            return decode_data_url(url)
        if url.startswith(("http://", "https://")):
            return await asyncio.to_thread(self._download, self.resolve_url(url))
        return await asyncio.to_thread(self._read_file, url)

    def _download(self, url: str) -> bytes:
        try:
            resp = self._session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Asset download failed for %s: %s", url, e)
            raise AssetFetchError(f"Network error fetching {url}: {e}") from e
        return resp.content

    @staticmethod
    def _read_file(path: str) -> bytes:
        p = Path(path[len("file://"):] if path.startswith("file://") else path)
        try:
            return p.read_bytes()
        except OSError as e:
            raise AssetFetchError(f"Cannot read {p}: {e}") from e
