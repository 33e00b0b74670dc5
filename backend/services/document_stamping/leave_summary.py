"""
Leave Summary Report
====================
Multi-page memo ("บันทึกข้อความ") reporting leave counts per staff member.

The memo header is measured, then plan_summary_pages decides which rows
land on which page and where the signature block goes. Drawing follows
the plan; continuation pages repeat the table header.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from core.logger import get_logger
from .codec import decode
from .document import A4_HEIGHT, A4_WIDTH, EmbeddedImage, Page, PdfDocument
from .fonts import AssetCache, FontCache, FontHandle
from .layout import wrap_paragraph
from .leave_form import DOTTED_LINE, resolve_emblem
from .models import StaffLeaveRecord, SummaryReportRequest
from .templates import SUMMARY_COLUMNS, LeaveType, TemplateManager
from .thai import format_count, format_date, localize_digits

log = get_logger(__name__)

MARGIN = 50
FONT_SIZE = 16
LINE_HEIGHT = 18
MEMO_TITLE_SIZE = 24
INDENT = 60
TEXT_WIDTH = A4_WIDTH - 2 * MARGIN
EMBLEM_SIZE = 40
MEMO_FIELDS_TOP = 60  # below the top margin

TABLE_FONT_SIZE = 12
ROW_HEIGHT = 20
COLUMN_WIDTHS = [30, 140, 100] + [45] * len(SUMMARY_COLUMNS)
BOTTOM_THRESHOLD = 60
SIGNATURE_BLOCK_HEIGHT = 100
CONTINUATION_TOP = MARGIN + 10
PAGE_NUMBER_SIZE = 14

SIGNATURE_MAX = (80, 40)
SIGNATURE_CENTER_FROM_RIGHT = 150


@dataclass
class SummaryPage:
    """What one report page holds. table_top is None on a signature-only page."""
    rows: range
    table_top: Optional[float] = None
    signature_top: Optional[float] = None


def plan_summary_pages(row_count: int, first_table_top: float, page_height: float = A4_HEIGHT) -> List[SummaryPage]:
    """
    Split staff rows across pages.

    A row that would cross the bottom threshold moves to a new page whose
    table header sits at the top. The signature block follows the last row,
    or gets a page of its own when the remaining space cannot hold it.
    """
    pages: List[SummaryPage] = []
    table_top = first_table_top
    start = 0
    y = table_top - ROW_HEIGHT

    for i in range(row_count):
        if y - ROW_HEIGHT < BOTTOM_THRESHOLD:
            pages.append(SummaryPage(rows=range(start, i), table_top=table_top))
            start = i
            table_top = page_height - CONTINUATION_TOP
            y = table_top - ROW_HEIGHT
        y -= ROW_HEIGHT

    last = SummaryPage(rows=range(start, row_count), table_top=table_top)
    pages.append(last)

    signature_top = y - LINE_HEIGHT
    if signature_top - SIGNATURE_BLOCK_HEIGHT < BOTTOM_THRESHOLD:
        pages.append(SummaryPage(rows=range(0), signature_top=page_height - CONTINUATION_TOP))
    else:
        last.signature_top = signature_top
    return pages


def _digits(text: str, thai_digits: bool) -> str:
    return localize_digits(text) if thai_digits else text


def default_intro(request: SummaryReportRequest) -> str:
    return (
        f"ตามที่ได้มีการรวบรวมสถิติการลาของข้าราชการครูและบุคลากร{request.org_name} "
        f"ประจำ{_digits(request.period, request.thai_digits)} บัดนี้ได้ดำเนินการเรียบร้อยแล้ว จึงขอรายงานรายละเอียดดังนี้"
    )


def intro_lines(request: SummaryReportRequest, font: FontHandle) -> List[str]:
    return wrap_paragraph(request.intro_text or default_intro(request), TEXT_WIDTH, INDENT, FONT_SIZE, font)


def first_table_top(intro_line_count: int, page_height: float = A4_HEIGHT) -> float:
    """Y of the table header on page one, below the memo fields and intro."""
    y = page_height - MARGIN - MEMO_FIELDS_TOP
    y -= LINE_HEIGHT * 2      # ที่/วันที่, เรื่อง
    y -= LINE_HEIGHT * 1.5    # เรียน
    y -= LINE_HEIGHT * 1.5
    y -= intro_line_count * LINE_HEIGHT
    return y - LINE_HEIGHT * 0.5


class LeaveSummaryComposer:
    """Builds the leave summary memo from a SummaryReportRequest."""

    def __init__(self, fonts: FontCache, assets: AssetCache, emblem_url: str = ""):
        self.fonts = fonts
        self.assets = assets
        self.emblem_url = emblem_url
        self.templates = TemplateManager()

    def compose(self, request: SummaryReportRequest) -> bytes:
        font = self.fonts.get()

        doc = PdfDocument.create_blank(A4_WIDTH, A4_HEIGHT)
        doc.use_font(font)

        intro = intro_lines(request, font)
        plan = plan_summary_pages(len(request.staff), first_table_top(len(intro)))

        for number, planned in enumerate(plan, start=1):
            page = doc.get_page(1) if number == 1 else doc.add_page(A4_WIDTH, A4_HEIGHT)
            if number == 1:
                self._draw_memo_header(doc, page, request, intro)
            else:
                self._draw_page_number(page, number, request.thai_digits)

            if planned.table_top is not None:
                self._draw_table(page, request.staff, planned, request.thai_digits)
            if planned.signature_top is not None:
                self._draw_signature(doc, page, request, planned.signature_top)

        log.info(f"Composed leave summary for {request.org_name}: {len(request.staff)} staff, {len(plan)} page(s)")
        return doc.serialize()

    # -------------------------------------------------------------------------

    def _draw_memo_header(self, doc: PdfDocument, page: Page, request: SummaryReportRequest, intro: List[str]) -> None:
        emblem = resolve_emblem(doc, request.emblem, self.assets, self.emblem_url)
        if emblem is not None:
            width, height = emblem.scale_to_fit(EMBLEM_SIZE, EMBLEM_SIZE)
            page.draw_image(emblem, MARGIN, page.height - MARGIN - EMBLEM_SIZE, width, height)
        page.draw_centered("บันทึกข้อความ", page.width / 2, page.height - MARGIN - 28, MEMO_TITLE_SIZE)

        y = page.height - MARGIN - MEMO_FIELDS_TOP
        page.draw_text(f"ส่วนราชการ  {request.org_name}", MARGIN, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_text(f"ที่  {_digits(request.reference_number, request.thai_digits) or '..........'}", MARGIN, y, FONT_SIZE)
        report_date = format_date(request.report_date or date.today(), request.thai_digits)
        page.draw_text(f"วันที่  {report_date}", page.width / 2, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_text(f"เรื่อง  รายงานสถิติการลา ประจำ{_digits(request.period, request.thai_digits)}", MARGIN, y, FONT_SIZE)
        y -= LINE_HEIGHT * 1.5
        page.draw_text(f"เรียน  ผู้อำนวยการ{request.org_name}", MARGIN, y, FONT_SIZE)
        y -= LINE_HEIGHT * 1.5

        for i, line in enumerate(intro):
            page.draw_text(line, MARGIN + (INDENT if i == 0 else 0), y, FONT_SIZE)
            y -= LINE_HEIGHT

    def _draw_page_number(self, page: Page, number: int, thai_digits: bool) -> None:
        page.draw_centered(_digits(f"- {number} -", thai_digits), page.width / 2, page.height - 30, PAGE_NUMBER_SIZE)

    def _draw_table(self, page: Page, staff: List[StaffLeaveRecord], planned: SummaryPage, thai_digits: bool) -> None:
        headers = ["ที่", "ชื่อ - สกุล", "ตำแหน่ง"] + [
            self.templates.require(leave_type).short_name_th for leave_type in SUMMARY_COLUMNS
        ]
        y = planned.table_top
        self._draw_row(page, headers, y)

        for index in planned.rows:
            y -= ROW_HEIGHT
            record = staff[index]
            by_type = {LeaveType(k): v for k, v in record.counts.items()}
            counts = [format_count(by_type.get(t), thai_digits) for t in SUMMARY_COLUMNS]
            self._draw_row(page, [_digits(str(index + 1), thai_digits), record.name, record.title] + counts, y)

    def _draw_row(self, page: Page, cells: List[str], y: float) -> None:
        x = MARGIN
        for width, text in zip(COLUMN_WIDTHS, cells):
            page.draw_rect(x, y - ROW_HEIGHT, width, ROW_HEIGHT, border_width=0.5)
            page.draw_text(text, x + 4, y - ROW_HEIGHT + 6, TABLE_FONT_SIZE)
            x += width

    def _draw_signature(self, doc: PdfDocument, page: Page, request: SummaryReportRequest, top: float) -> None:
        center_x = page.width - SIGNATURE_CENTER_FROM_RIGHT
        y = top
        page.draw_text("จึงเรียนมาเพื่อโปรดทราบ", MARGIN + INDENT, y, FONT_SIZE)
        y -= 40

        signature = None
        if request.approver_signature:
            signature = doc.embed_image(decode(request.approver_signature), "approver signature")
        if isinstance(signature, EmbeddedImage):
            scale = request.approver_signature_scale or 1
            width, height = signature.scale_to_fit(SIGNATURE_MAX[0] * scale, SIGNATURE_MAX[1] * scale)
            page.draw_image(signature, center_x - width / 2, y + (request.approver_signature_y_offset or 0), width, height)
        else:
            page.draw_centered(DOTTED_LINE, center_x, y, FONT_SIZE)

        y -= 20
        page.draw_centered(f"( {request.approver.name} )", center_x, y, FONT_SIZE)
        y -= LINE_HEIGHT
        page.draw_centered(request.approver.title, center_x, y, FONT_SIZE)
