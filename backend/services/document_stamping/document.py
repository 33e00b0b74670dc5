"""
Document Model Adapter
======================
Opens or creates PDFs (pypdf) and gives each page a reportlab drawing
surface. Drawings go to a per-page overlay canvas that is merged onto the
page when the document is serialized.

Image embedding never raises: it returns either an EmbeddedImage or an
ImageEmbedFailure, and renderers skip the draw call on failure.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError
from pypdf import PageObject, PasswordType, PdfReader, PdfWriter, Transformation
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.logger import get_logger
from .errors import CorruptDocument
from .fonts import FontHandle

log = get_logger(__name__)

# A4 in points
A4_WIDTH = 595.28
A4_HEIGHT = 841.89

RGB = Tuple[float, float, float]
BLACK: RGB = (0, 0, 0)
WHITE: RGB = (1, 1, 1)

SUPPORTED_IMAGE_FORMATS = ("PNG", "JPEG")


# =============================================================================
# IMAGES
# =============================================================================

@dataclass
class EmbeddedImage:
    """A decoded raster image ready to draw."""
    reader: ImageReader
    width: int
    height: int

    def scale_to_fit(self, max_width: float, max_height: float) -> Tuple[float, float]:
        """Largest size within the bounds that keeps the aspect ratio."""
        scale = min(max_width / self.width, max_height / self.height)
        return self.width * scale, self.height * scale


@dataclass
class ImageEmbedFailure:
    """Why an image could not be embedded. Cosmetic, never fatal."""
    reason: str


ImageResult = Union[EmbeddedImage, ImageEmbedFailure]


def embed_image(data: bytes, label: str = "image") -> ImageResult:
    """Decode PNG/JPEG bytes. Anything else is reported as a failure."""
    if not data:
        return ImageEmbedFailure(f"{label}: empty payload")

    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        log.warning(f"Skipping {label}: unreadable image ({e})")
        return ImageEmbedFailure(f"{label}: unreadable image ({e})")

    if img.format not in SUPPORTED_IMAGE_FORMATS:
        log.warning(f"Skipping {label}: unsupported format {img.format}")
        return ImageEmbedFailure(f"{label}: unsupported format {img.format}")

    if img.width == 0 or img.height == 0:
        return ImageEmbedFailure(f"{label}: zero-sized image")

    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA")

    return EmbeddedImage(reader=ImageReader(img), width=img.width, height=img.height)


# =============================================================================
# PAGES
# =============================================================================

class Page:
    """One page plus its lazily created overlay canvas."""

    def __init__(self, pdf_page: PageObject, font: Optional[FontHandle] = None):
        self._pdf_page = pdf_page
        box = pdf_page.mediabox
        self.origin = (float(box.left), float(box.bottom))
        self.width = float(box.width)
        self.height = float(box.height)
        self.font = font
        self._buffer: Optional[BytesIO] = None
        self._canvas: Optional[canvas.Canvas] = None

    @property
    def canvas(self) -> canvas.Canvas:
        if self._canvas is None:
            self._buffer = BytesIO()
            self._canvas = canvas.Canvas(self._buffer, pagesize=(self.width, self.height))
        return self._canvas

    def _require_font(self) -> FontHandle:
        if self.font is None:
            raise RuntimeError("No font set on page; call PdfDocument.use_font() first")
        return self.font

    def text_width(self, text: str, size: float) -> float:
        return self._require_font().width(text, size)

    def draw_text(self, text: str, x: float, y: float, size: float, color: RGB = BLACK) -> None:
        c = self.canvas
        c.setFont(self._require_font().name, size)
        c.setFillColorRGB(*color)
        c.drawString(x, y, text)

    def draw_centered(self, text: str, center_x: float, y: float, size: float, color: RGB = BLACK) -> None:
        self.draw_text(text, center_x - self.text_width(text, size) / 2, y, size, color)

    def draw_right(self, text: str, right_x: float, y: float, size: float, color: RGB = BLACK) -> None:
        self.draw_text(text, right_x - self.text_width(text, size), y, size, color)

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        border: RGB = BLACK,
        border_width: float = 1,
        fill: Optional[RGB] = None,
    ) -> None:
        c = self.canvas
        c.setStrokeColorRGB(*border)
        c.setLineWidth(border_width)
        if fill is not None:
            c.setFillColorRGB(*fill)
        c.rect(x, y, width, height, stroke=1, fill=1 if fill is not None else 0)

    def draw_image(self, image: EmbeddedImage, x: float, y: float, width: float, height: float) -> None:
        self.canvas.drawImage(image.reader, x, y, width=width, height=height, mask="auto")

    def flush(self) -> None:
        """Merge the overlay (if anything was drawn) onto the page."""
        if self._canvas is None:
            return
        self._canvas.showPage()
        self._canvas.save()
        self._buffer.seek(0)
        overlay = PdfReader(self._buffer).pages[0]

        ox, oy = self.origin
        if ox or oy:
            self._pdf_page.merge_transformed_page(overlay, Transformation().translate(ox, oy))
        else:
            self._pdf_page.merge_page(overlay)
        self._canvas = None
        self._buffer = None


# =============================================================================
# DOCUMENTS
# =============================================================================

class PdfDocument:
    """A PDF being stamped or composed."""

    def __init__(self, writer: PdfWriter):
        self._writer = writer
        self._pages: List[Page] = [Page(p) for p in writer.pages]
        self.font: Optional[FontHandle] = None

    @classmethod
    def open(cls, data: bytes) -> "PdfDocument":
        """
        Parse an existing PDF.

        Raises:
            CorruptDocument: empty, unparseable, locked or page-less input
        """
        if not data:
            raise CorruptDocument("Source document is empty")
        try:
            reader = PdfReader(BytesIO(data))
            if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                raise CorruptDocument("Source document is password protected")
            writer = PdfWriter(clone_from=reader)
        except CorruptDocument:
            raise
        except Exception as e:
            raise CorruptDocument(f"Source is not a valid PDF: {e}") from e

        if len(writer.pages) == 0:
            raise CorruptDocument("Source document has no pages")

        log.debug(f"Opened PDF with {len(writer.pages)} page(s)")
        return cls(writer)

    @classmethod
    def create_blank(cls, width: float = A4_WIDTH, height: float = A4_HEIGHT) -> "PdfDocument":
        writer = PdfWriter()
        writer.add_blank_page(width=width, height=height)
        return cls(writer)

    @classmethod
    def from_image(cls, image: EmbeddedImage) -> "PdfDocument":
        """A4 page with the image scaled to fit, centred and top-aligned."""
        doc = cls.create_blank()
        page = doc.get_page(1)
        width, height = image.scale_to_fit(page.width, page.height)
        page.draw_image(image, (page.width - width) / 2, page.height - height, width, height)
        return doc

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def use_font(self, font: FontHandle) -> None:
        self.font = font
        for page in self._pages:
            page.font = font

    def add_page(self, width: Optional[float] = None, height: Optional[float] = None) -> Page:
        if width is None or height is None:
            template = self._pages[0] if self._pages else None
            width = template.width if template else A4_WIDTH
            height = template.height if template else A4_HEIGHT
        pdf_page = self._writer.add_blank_page(width=width, height=height)
        page = Page(pdf_page, self.font)
        self._pages.append(page)
        return page

    def get_page(self, index: int) -> Page:
        """1-based page lookup, clamped to the valid range."""
        clamped = min(max(int(index or 1), 1), len(self._pages))
        if clamped != index:
            log.debug(f"Page {index} clamped to {clamped} of {len(self._pages)}")
        return self._pages[clamped - 1]

    def embed_image(self, data: bytes, label: str = "image") -> ImageResult:
        return embed_image(data, label)

    def serialize(self) -> bytes:
        for page in self._pages:
            page.flush()
        output = BytesIO()
        self._writer.write(output)
        return output.getvalue()
