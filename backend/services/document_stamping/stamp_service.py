"""
Stamp Service
=============
Draws official markings onto existing documents.

- Registry-number stamp: fixed box in the top-right corner with the
  organization, registry number, date and time
- Command stamp: box anchored bottom-right (primary approver) or
  bottom-left (counter-signature) whose height grows with the wrapped
  command text, followed by a centred signature block

Layout is measured first (measure_command_box) and drawn afterwards.
"""

from dataclasses import dataclass
from datetime import date
from typing import List

from core.logger import get_logger
from .codec import PDF_MEDIA_TYPE, decode, media_type_of
from .document import WHITE, EmbeddedImage, ImageEmbedFailure, PdfDocument, embed_image
from .errors import CorruptDocument
from .fonts import FontCache, FontHandle
from .layout import wrap
from .models import CommandStampRequest, ReceiveNumberRequest, StampAlignment
from .thai import format_date, format_time

log = get_logger(__name__)

CM = 28.35  # points per centimetre
ORG_PLACEHOLDER = "โรงเรียน..................."

# Registry-number stamp
RECEIVE_BOX_WIDTH = 160
RECEIVE_BOX_HEIGHT = 75
RECEIVE_MARGIN = 20
RECEIVE_FONT_SIZE = 14
RECEIVE_LINE_HEIGHT = 14
RECEIVE_PADDING_LEFT = 6
RECEIVE_PADDING_TOP = 12
RECEIVE_COLOR = (0.8, 0.2, 0.2)
LOGO_SIZE = 20
LOGO_TEXT_GAP = 24

# Command stamp
COMMAND_BOX_WIDTH = 260
COMMAND_MARGIN = 0.5 * CM
COMMAND_FONT_SIZE = 14
COMMAND_LINE_HEIGHT = COMMAND_FONT_SIZE * 1.05
COMMAND_TEXT_WIDTH = COMMAND_BOX_WIDTH - 10
COMMAND_TEXT_INSET = 8
COMMAND_TEXT_TOP = 20
MIN_BOX_HEIGHT = 3 * CM
SIGNATURE_BLOCK_HEIGHT = 85
BOX_PADDING = 15
SIGNATURE_MAX_WIDTH = 80
SIGNATURE_MAX_HEIGHT = 40
COMMAND_LOGO_SIZE = 30
COMMAND_FILL = (0.97, 0.97, 0.97)
COMMAND_BORDER = (0, 0, 0.5)


@dataclass
class CommandBoxGeometry:
    """Where a command stamp goes and what text it holds."""
    x: float
    y: float
    width: float
    height: float
    lines: List[str]

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2


def measure_command_box(
    command_text: str,
    page_width: float,
    font: FontHandle,
    alignment: StampAlignment = StampAlignment.RIGHT,
) -> CommandBoxGeometry:
    """Wrap the command text and size the box around it."""
    lines = wrap(command_text or "", COMMAND_TEXT_WIDTH, COMMAND_FONT_SIZE, font)
    height = max(
        MIN_BOX_HEIGHT,
        len(lines) * COMMAND_LINE_HEIGHT + SIGNATURE_BLOCK_HEIGHT + BOX_PADDING,
    )
    if StampAlignment(alignment) == StampAlignment.LEFT:
        x = COMMAND_MARGIN
    else:
        x = page_width - COMMAND_BOX_WIDTH - COMMAND_MARGIN
    return CommandBoxGeometry(x=x, y=COMMAND_MARGIN, width=COMMAND_BOX_WIDTH, height=height, lines=lines)


class StampService:
    """
    Service for stamping registry numbers and commands onto documents.

    Both operations return the serialized PDF bytes. Structural problems
    (unreadable source, missing font) raise; a logo or signature that
    cannot be embedded is skipped.
    """

    def __init__(self, fonts: FontCache):
        self.fonts = fonts

    def stamp_receive_number(self, request: ReceiveNumberRequest) -> bytes:
        doc = PdfDocument.open(decode(request.source))
        doc.use_font(self.fonts.get())
        page = doc.get_page(request.target_page)

        x = page.width - RECEIVE_BOX_WIDTH - RECEIVE_MARGIN
        y = page.height - RECEIVE_BOX_HEIGHT - RECEIVE_MARGIN
        page.draw_rect(
            x, y, RECEIVE_BOX_WIDTH, RECEIVE_BOX_HEIGHT,
            border=RECEIVE_COLOR, border_width=1.5, fill=WHITE,
        )

        text_x = x + RECEIVE_PADDING_LEFT
        current_y = y + RECEIVE_BOX_HEIGHT - RECEIVE_PADDING_TOP
        org_x = text_x

        if request.org_logo:
            logo = doc.embed_image(decode(request.org_logo), "org logo")
            if isinstance(logo, EmbeddedImage):
                width, height = logo.scale_to_fit(LOGO_SIZE, LOGO_SIZE)
                page.draw_image(logo, text_x, current_y - 2, width, height)
                org_x = text_x + LOGO_TEXT_GAP

        page.draw_text(request.org_name or ORG_PLACEHOLDER, org_x, current_y, RECEIVE_FONT_SIZE, RECEIVE_COLOR)

        for line in (
            f"เลขรับที่: {request.registry_number}",
            f"วันที่: {format_date(request.date)}",
            f"เวลา: {format_time(request.time)}",
        ):
            current_y -= RECEIVE_LINE_HEIGHT
            page.draw_text(line, text_x, current_y, RECEIVE_FONT_SIZE, RECEIVE_COLOR)

        log.info(f"Stamped registry number {request.registry_number} on page {request.target_page}")
        return doc.serialize()

    def stamp_command(self, request: CommandStampRequest) -> bytes:
        doc = self._open_command_source(request)
        font = self.fonts.get()
        doc.use_font(font)
        page = doc.get_page(request.target_page)

        box = measure_command_box(request.command_text, page.width, font, request.alignment)
        page.draw_rect(
            box.x, box.y, box.width, box.height,
            border=COMMAND_BORDER, border_width=1, fill=COMMAND_FILL,
        )

        current_y = box.top - COMMAND_TEXT_TOP
        for line in box.lines:
            page.draw_text(line, box.x + COMMAND_TEXT_INSET, current_y, COMMAND_FONT_SIZE)
            current_y -= COMMAND_LINE_HEIGHT

        # Signature block, bottom-up
        footer_y = box.y + 10
        page.draw_centered(format_date(request.stamp_date or date.today()), box.center_x, footer_y, COMMAND_FONT_SIZE)
        footer_y += COMMAND_LINE_HEIGHT

        title = " ".join(part for part in (request.signer_title, request.org_name) if part) or ORG_PLACEHOLDER
        page.draw_centered(title, box.center_x, footer_y, COMMAND_FONT_SIZE)
        footer_y += COMMAND_LINE_HEIGHT

        logo = doc.embed_image(decode(request.org_logo), "org logo") if request.org_logo else None
        if isinstance(logo, EmbeddedImage):
            width, height = logo.scale_to_fit(COMMAND_LOGO_SIZE, COMMAND_LOGO_SIZE)
            page.draw_image(logo, box.center_x - width / 2, footer_y, width, height)
            footer_y += height + 5

        page.draw_centered(f"( {request.signer_name} )", box.center_x, footer_y, COMMAND_FONT_SIZE)
        footer_y += COMMAND_LINE_HEIGHT + 5

        if request.signature_image:
            signature = doc.embed_image(decode(request.signature_image), "signature")
            if isinstance(signature, EmbeddedImage):
                scale = request.signature_scale or 1
                width, height = signature.scale_to_fit(SIGNATURE_MAX_WIDTH * scale, SIGNATURE_MAX_HEIGHT * scale)
                page.draw_image(
                    signature,
                    box.center_x - width / 2,
                    footer_y + (request.signature_y_offset or 0),
                    width,
                    height,
                )

        log.info(
            f"Stamped command ({len(box.lines)} line(s), {StampAlignment(request.alignment).value}) "
            f"on page {request.target_page} of {doc.page_count}"
        )
        return doc.serialize()

    def _open_command_source(self, request: CommandStampRequest) -> PdfDocument:
        """Existing PDF, an image wrapped onto an A4 page, or a blank page."""
        if not request.source:
            return PdfDocument.create_blank()

        media_type = (request.source_media_type or media_type_of(request.source) or PDF_MEDIA_TYPE).lower()
        data = decode(request.source)
        if "pdf" in media_type:
            return PdfDocument.open(data)

        image = embed_image(data, "source image")
        if isinstance(image, ImageEmbedFailure):
            raise CorruptDocument(f"Source image cannot be read: {image.reason}")
        return PdfDocument.from_image(image)
