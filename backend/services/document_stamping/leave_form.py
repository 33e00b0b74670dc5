"""
Leave Request Form
==================
Composes the official single-page leave request: letterhead emblem,
salutation, indented paragraphs, requester signature, statistics table
and the approver's decision box.
"""

from datetime import date
from typing import Dict, Optional

from core.logger import get_logger
from .codec import decode
from .document import A4_HEIGHT, A4_WIDTH, EmbeddedImage, Page, PdfDocument
from .fonts import AssetCache, FontCache, load_optional_asset
from .layout import wrap_paragraph
from .models import ApprovalOutcome, EncodedBlob, LeaveFormRequest, LeaveTally
from .templates import LeaveTemplate, LeaveType, TemplateManager
from .thai import DATE_PLACEHOLDER, format_count, format_date, format_date_long, format_time

log = get_logger(__name__)

MARGIN = 50
FONT_SIZE = 16
LINE_HEIGHT = 18
TITLE_SIZE = 20
INDENT = 60
TEXT_WIDTH = A4_WIDTH - 2 * MARGIN
EMBLEM_SIZE = 60

SIGNATURE_COLUMN_OFFSET = 250
REQUESTER_SIGNATURE_MAX = (100, 40)
APPROVER_SIGNATURE_MAX = (80, 40)

TABLE_FONT_SIZE = 12
TABLE_TITLE_SIZE = 14
CELL_WIDTH = 60
ROW_HEIGHT = 20
TABLE_HEADERS = ("ประเภท", "ลามาแล้ว", "ลาครั้งนี้", "รวมเป็น")

APPROVER_BOX_WIDTH = 220
APPROVER_BOX_HEIGHT = 140
APPROVER_FONT_SIZE = 14
DOTTED_SIGNATURE = "(ลงชื่อ)................................................."
DOTTED_LINE = "......................................................"


def resolve_emblem(doc: PdfDocument, blob: Optional[EncodedBlob], assets: AssetCache, default_url: str):
    """Caller-supplied emblem, else the default one; None when neither works."""
    data = decode(blob) if blob else load_optional_asset(assets, default_url)
    if not data:
        return None
    emblem = doc.embed_image(data, "emblem")
    return emblem if isinstance(emblem, EmbeddedImage) else None


def _checkbox(marked: bool, label: str) -> str:
    return f"[ / ] {label}" if marked else f"[   ] {label}"


class LeaveFormComposer:
    """Builds the leave request form from a LeaveFormRequest."""

    def __init__(self, fonts: FontCache, assets: AssetCache, emblem_url: str = ""):
        self.fonts = fonts
        self.assets = assets
        self.emblem_url = emblem_url
        self.templates = TemplateManager()

    def compose(self, request: LeaveFormRequest) -> bytes:
        template = self.templates.require(request.leave_type)
        font = self.fonts.get()

        doc = PdfDocument.create_blank(A4_WIDTH, A4_HEIGHT)
        doc.use_font(font)
        page = doc.get_page(1)

        emblem = resolve_emblem(doc, request.emblem, self.assets, self.emblem_url)
        if emblem is not None:
            width, height = emblem.scale_to_fit(EMBLEM_SIZE, EMBLEM_SIZE)
            page.draw_image(emblem, (page.width - width) / 2, page.height - MARGIN - EMBLEM_SIZE, width, height)

        y = page.height - MARGIN - 80
        page.draw_centered(template.form_title, page.width / 2, y, TITLE_SIZE)
        y -= 30

        y = self._draw_heading(page, request, template, y)
        y = self._draw_body(page, request, template, y)
        y = self._draw_requester_signature(doc, page, request, y)

        table_top = y
        self._draw_statistics(page, request, template, table_top)
        self._draw_approver_box(doc, page, request, table_top)

        log.info(
            f"Composed {template.type.value} leave form for {request.requester.name} "
            f"({ApprovalOutcome(request.outcome).value})"
        )
        return doc.serialize()

    # -------------------------------------------------------------------------

    def _paragraph(self, page: Page, text: str, y: float) -> float:
        for i, line in enumerate(wrap_paragraph(text, TEXT_WIDTH, INDENT, FONT_SIZE, page.font)):
            page.draw_text(line, MARGIN + (INDENT if i == 0 else 0), y, FONT_SIZE)
            y -= LINE_HEIGHT
        return y

    def _draw_heading(self, page: Page, request: LeaveFormRequest, template: LeaveTemplate, y: float) -> float:
        org = request.requester.org
        right = page.width - MARGIN - 20
        page.draw_right(f"เขียนที่ {org}", right, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_right(format_date_long(request.written_date or date.today(), request.thai_digits), right, y, FONT_SIZE)
        y -= LINE_HEIGHT * 2

        page.draw_text(f"เรื่อง  ขออนุญาต{template.name_th}", MARGIN, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_text(f"เรียน  ผู้อำนวยการ{org}", MARGIN, y, FONT_SIZE)
        return y - LINE_HEIGHT * 1.5

    def _draw_body(self, page: Page, request: LeaveFormRequest, template: LeaveTemplate, y: float) -> float:
        person = request.requester
        y = self._paragraph(page, f"ข้าพเจ้า {person.name} ตำแหน่ง {person.title} สังกัด {person.org}", y)

        if template.time_scoped:
            sentence = f"มีความประสงค์ขอ{template.name_th} เนื่องจาก {request.reason or '-'}"
        else:
            sentence = f"ขอลา{template.name_th}"
            if request.reason:
                sentence += f" เนื่องจาก {request.reason}"

        period = f"ตั้งแต่วันที่ {format_date(request.start_date, request.thai_digits)}"
        if request.start_time:
            period += f" เวลา {format_time(request.start_time, request.thai_digits)}"
        period += f" ถึงวันที่ {format_date(request.end_date, request.thai_digits)}"
        if request.end_time:
            period += f" ถึงเวลา {format_time(request.end_time, request.thai_digits)}"
        if not template.time_scoped:
            period += f" มีกำหนด {format_count(request.days or 0, request.thai_digits)} วัน"

        y = self._paragraph(page, f"{sentence} {period}", y)
        y -= LINE_HEIGHT * 0.5

        last = request.last_leave
        if last is not None:
            last_days = format_count(last.days, request.thai_digits) if last.days is not None else "..."
            disclosure = (
                f"ข้าพเจ้าได้ลาครั้งสุดท้ายตั้งแต่วันที่ {format_date(last.start_date, request.thai_digits)} "
                f"ถึงวันที่ {format_date(last.end_date, request.thai_digits)} มีกำหนด {last_days} วัน"
            )
        else:
            disclosure = (
                f"ข้าพเจ้าได้ลาครั้งสุดท้ายตั้งแต่วันที่ {DATE_PLACEHOLDER} "
                f"ถึงวันที่ {DATE_PLACEHOLDER} มีกำหนด ... วัน"
            )
        y = self._paragraph(page, disclosure, y)

        y = self._paragraph(
            page,
            f"ในระหว่างลาติดต่อข้าพเจ้าได้ที่ {request.contact_info or '-'} "
            f"เบอร์โทรศัพท์ {request.phone or '-'}",
            y,
        )
        return y - LINE_HEIGHT

    def _draw_requester_signature(self, doc: PdfDocument, page: Page, request: LeaveFormRequest, y: float) -> float:
        sig_x = page.width - SIGNATURE_COLUMN_OFFSET
        page.draw_text("ขอแสดงความนับถือ", sig_x, y, FONT_SIZE)
        y -= 40

        signature = None
        if request.requester_signature:
            signature = doc.embed_image(decode(request.requester_signature), "requester signature")
        if isinstance(signature, EmbeddedImage):
            width, height = signature.scale_to_fit(*REQUESTER_SIGNATURE_MAX)
            page.draw_image(signature, sig_x + 20, y, width, height)
        else:
            page.draw_text(DOTTED_SIGNATURE, sig_x, y + 10, FONT_SIZE)

        y -= 20
        page.draw_text(f"( {request.requester.name} )", sig_x + 20, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_text(f"ตำแหน่ง {request.requester.title}", sig_x + 20, y, FONT_SIZE)
        return y - LINE_HEIGHT * 2

    def _draw_statistics(self, page: Page, request: LeaveFormRequest, template: LeaveTemplate, top: float) -> None:
        stats: Dict[LeaveType, LeaveTally] = {LeaveType(k): v for k, v in request.statistics.items()}

        page.draw_text("สถิติการลาในปีงบประมาณนี้", MARGIN, top + 10, TABLE_TITLE_SIZE)
        row_y = top - 10
        self._draw_row(page, TABLE_HEADERS, row_y)
        row_y -= ROW_HEIGHT

        for leave_type in template.table_rows:
            tally = stats.get(leave_type, LeaveTally())
            this_time = format_count(tally.this_time, request.thai_digits) if tally.this_time else "-"
            self._draw_row(
                page,
                (
                    self.templates.require(leave_type).short_name_th,
                    format_count(tally.prior, request.thai_digits),
                    this_time,
                    format_count(tally.cumulative, request.thai_digits),
                ),
                row_y,
            )
            row_y -= ROW_HEIGHT

    def _draw_row(self, page: Page, cells, y: float) -> None:
        for i, text in enumerate(cells):
            x = MARGIN + i * CELL_WIDTH
            page.draw_rect(x, y - ROW_HEIGHT + 5, CELL_WIDTH, ROW_HEIGHT, border_width=0.5)
            page.draw_text(text, x + 5, y - ROW_HEIGHT + 10, TABLE_FONT_SIZE)

    def _draw_approver_box(self, doc: PdfDocument, page: Page, request: LeaveFormRequest, top: float) -> None:
        box_x = page.width / 2 + 20
        center_x = box_x + APPROVER_BOX_WIDTH / 2
        outcome = ApprovalOutcome(request.outcome)

        page.draw_rect(box_x, top - 120, APPROVER_BOX_WIDTH, APPROVER_BOX_HEIGHT, border_width=0.5)

        y = top - 20
        page.draw_centered("ความเห็น / คำสั่ง", center_x, y, APPROVER_FONT_SIZE)
        y -= 25
        page.draw_text(_checkbox(outcome == ApprovalOutcome.APPROVED, "อนุญาต"), box_x + 20, y, APPROVER_FONT_SIZE)
        y -= 20
        page.draw_text(_checkbox(outcome == ApprovalOutcome.REJECTED, "ไม่อนุมัติ"), box_x + 20, y, APPROVER_FONT_SIZE)
        y -= 30

        signature = None
        if outcome == ApprovalOutcome.APPROVED and request.approver_signature:
            signature = doc.embed_image(decode(request.approver_signature), "approver signature")
        if isinstance(signature, EmbeddedImage):
            scale = request.approver_signature_scale or 1
            width, height = signature.scale_to_fit(APPROVER_SIGNATURE_MAX[0] * scale, APPROVER_SIGNATURE_MAX[1] * scale)
            page.draw_image(signature, center_x - width / 2, y + (request.approver_signature_y_offset or 0), width, height)
        else:
            page.draw_centered(DOTTED_LINE, center_x, y, APPROVER_FONT_SIZE)

        y -= 20
        page.draw_centered(f"( {request.approver.name} )", center_x, y, APPROVER_FONT_SIZE)
        y -= 15
        page.draw_centered(f"ตำแหน่ง {request.approver.title}", center_x, y, APPROVER_FONT_SIZE)
        y -= 15
        approved_on = format_date(request.approved_date, request.thai_digits) if request.approved_date else "....................................."
        page.draw_centered(f"วันที่ {approved_on}", center_x, y, APPROVER_FONT_SIZE)
