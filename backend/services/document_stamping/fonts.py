"""
Font & Asset Loader
===================
Process-wide caches for the Thai font and remote decoration assets.

reportlab's standard fonts have no Thai glyphs, so a TrueType font is
fetched once, registered with pdfmetrics, and shared by every call.
Both caches are lock-guarded so concurrent first access fetches once.
"""

import threading
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional

import requests
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError

from core.config import Settings, get_settings
from core.logger import get_logger
from .errors import AssetFetchTimeout, AssetUnavailable, FontFetchTimeout, FontUnavailable

log = get_logger(__name__)


@dataclass(frozen=True)
class FontHandle:
    """A font registered with reportlab, addressed by name."""
    name: str

    def width(self, text: str, size: float) -> float:
        """Rendered width of text at the given size, in points."""
        return pdfmetrics.stringWidth(text, self.name, size)


class AssetCache:
    """Byte cache for remote assets, keyed by URL."""

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session or requests.Session()
        self._store: Dict[str, bytes] = {}
        self._lock = threading.Lock()
        self._url_locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, url: str) -> threading.Lock:
        with self._lock:
            return self._url_locks.setdefault(url, threading.Lock())

    def fetch(self, url: str) -> bytes:
        """
        Return the asset at url, downloading it on first use.

        Downloads of different URLs run concurrently; callers asking for the
        same URL wait for the first download.

        Raises:
            AssetFetchTimeout: the download exceeded the timeout
            AssetUnavailable: any other network or HTTP failure
        """
        with self._lock_for(url):
            with self._lock:
                cached = self._store.get(url)
            if cached is not None:
                return cached

            log.info(f"Fetching asset {url} (timeout={self.timeout}s)")
            try:
                response = self._session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.Timeout as e:
                raise AssetFetchTimeout(f"Timed out fetching {url}") from e
            except requests.RequestException as e:
                raise AssetUnavailable(f"Could not fetch {url}: {e}") from e

            data = response.content
            with self._lock:
                self._store[url] = data
            log.debug(f"Cached {len(data)} bytes from {url}")
            return data

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class FontCache:
    """
    Lazily loaded Thai font.

    warm() loads and registers the font (idempotent); get() returns the
    handle, warming first if needed. Inject a preloaded cache in tests.
    """

    def __init__(
        self,
        font_name: str = "THSarabunNew",
        font_url: Optional[str] = None,
        font_path: Optional[str] = None,
        assets: Optional[AssetCache] = None,
    ):
        self.font_name = font_name
        self.font_url = font_url
        self.font_path = font_path
        self.assets = assets or AssetCache()
        self._handle: Optional[FontHandle] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, assets: Optional[AssetCache] = None) -> "FontCache":
        settings = settings or get_settings()
        return cls(
            font_name=settings.font_name,
            font_url=settings.font_url,
            font_path=settings.font_path,
            assets=assets or AssetCache(timeout=settings.fetch_timeout),
        )

    @classmethod
    def preloaded(cls, handle: FontHandle) -> "FontCache":
        """A cache that already holds a registered font (e.g. Helvetica)."""
        cache = cls(font_name=handle.name)
        cache._handle = handle
        return cache

    @property
    def is_warm(self) -> bool:
        return self._handle is not None

    def warm(self) -> FontHandle:
        with self._lock:
            if self._handle is None:
                self._handle = self._load()
            return self._handle

    def get(self) -> FontHandle:
        handle = self._handle
        return handle if handle is not None else self.warm()

    def _load(self) -> FontHandle:
        if self.font_name in pdfmetrics.getRegisteredFontNames():
            return FontHandle(self.font_name)

        data = self._read_bytes()
        try:
            pdfmetrics.registerFont(TTFont(self.font_name, BytesIO(data)))
        except (TTFError, ValueError, KeyError) as e:
            raise FontUnavailable(f"Font data for {self.font_name} is not a usable TrueType font: {e}") from e

        log.info(f"Registered font {self.font_name} ({len(data)} bytes)")
        return FontHandle(self.font_name)

    def _read_bytes(self) -> bytes:
        if self.font_path:
            try:
                return Path(self.font_path).read_bytes()
            except OSError as e:
                raise FontUnavailable(f"Cannot read font file {self.font_path}: {e}") from e

        if not self.font_url:
            raise FontUnavailable("No font source configured")

        try:
            return self.assets.fetch(self.font_url)
        except AssetFetchTimeout as e:
            raise FontFetchTimeout(str(e)) from e
        except AssetUnavailable as e:
            raise FontUnavailable(str(e)) from e


def load_optional_asset(assets: AssetCache, url: Optional[str]) -> bytes:
    """
    Best-effort fetch for decorative assets. Failures give b"".
    """
    if not url:
        return b""
    try:
        return assets.fetch(url)
    except AssetUnavailable as e:
        log.warning(f"Optional asset unavailable, continuing without it: {e}")
        return b""
