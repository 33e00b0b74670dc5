"""
Pytest Configuration and Fixtures
==================================
Shared test fixtures for the stamping engine tests.

Tests run offline: the font cache is preloaded with reportlab's built-in
Helvetica and the default emblem is disabled.
"""

import os
import struct
import sys
import zlib
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pypdf import PdfReader, PdfWriter

# No network during tests
os.environ["STAMPING_WARM_ON_STARTUP"] = "0"
os.environ["STAMPING_EMBLEM_URL"] = ""

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from core.config import Settings
from services.document_stamping import DocumentGenerator, FontCache, FontHandle
from services.document_stamping.codec import decode, encode
from api.document_stamping import get_generator
from main import app


@pytest.fixture
def font():
    """Built-in font, always registered with reportlab."""
    return FontHandle("Helvetica")


@pytest.fixture
def fonts(font):
    return FontCache.preloaded(font)


@pytest.fixture
def settings():
    return Settings(font_url="", font_path=None, emblem_url="", fetch_timeout=1)


@pytest.fixture
def generator(fonts, settings):
    """Engine with no network dependencies."""
    return DocumentGenerator(fonts=fonts, settings=settings)


@pytest.fixture
def client(generator):
    """FastAPI test client fixture."""
    app.dependency_overrides[get_generator] = lambda: generator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    """A small opaque PNG."""
    buffer = BytesIO()
    Image.new("RGB", (40, 20), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_blob(png_bytes):
    return encode(png_bytes, "image/png")


@pytest.fixture
def other_png_blob():
    """A second PNG with different pixels, stored as its own image."""
    buffer = BytesIO()
    Image.new("RGB", (30, 30), (20, 60, 200)).save(buffer, format="PNG")
    return encode(buffer.getvalue(), "image/png")


def _png_chunk(tag: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", zlib.crc32(tag + data) & 0xFFFFFFFF)


@pytest.fixture
def oversized_png_bytes():
    """PNG whose header claims 30000x30000 pixels, far above Pillow's pixel limit."""
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


@pytest.fixture
def make_pdf():
    """Factory for blank PDFs with the given number of pages."""
    def _make(pages: int = 1, width: float = 595.28, height: float = 841.89) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=width, height=height)
        buffer = BytesIO()
        writer.write(buffer)
        return buffer.getvalue()
    return _make


@pytest.fixture
def pdf_blob(make_pdf):
    """Three-page A4 document as a data URI."""
    return encode(make_pdf(3))


@pytest.fixture
def read_pdf():
    """Parse an engine result (EncodedBlob or bytes) back into a reader."""
    def _read(result) -> PdfReader:
        data = decode(result) if isinstance(result, str) else result
        return PdfReader(BytesIO(data))
    return _read
