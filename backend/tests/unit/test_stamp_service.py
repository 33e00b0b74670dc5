"""
Stamp Service Tests
===================
Unit tests for the registry-number and command stamps.
"""

import sys
from datetime import date, time
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfReader

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from services.document_stamping import stamp_service
from services.document_stamping.codec import encode
from services.document_stamping.document import A4_WIDTH
from services.document_stamping.errors import CorruptDocument, FontUnavailable
from services.document_stamping.fonts import FontCache
from services.document_stamping.models import CommandStampRequest, ReceiveNumberRequest, StampAlignment
from services.document_stamping.stamp_service import (
    BOX_PADDING,
    COMMAND_BOX_WIDTH,
    COMMAND_LINE_HEIGHT,
    COMMAND_MARGIN,
    MIN_BOX_HEIGHT,
    SIGNATURE_BLOCK_HEIGHT,
    StampService,
    measure_command_box,
)

BROKEN_IMAGE = "data:image/png;base64,bm90IGFuIGltYWdl"


@pytest.fixture
def service(fonts):
    return StampService(fonts)


def _reader(data: bytes) -> PdfReader:
    return PdfReader(BytesIO(data))


class TestReceiveNumber:
    """Test suite for the registry-number stamp."""

    def _request(self, source, **overrides):
        values = dict(
            source=source,
            registry_number="123/2567",
            date=date(2024, 1, 1),
            time="10:30",
            org_name="School",
        )
        values.update(overrides)
        return ReceiveNumberRequest(**values)

    def test_stamps_target_page_only(self, service, pdf_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, target_page=2)))

        assert len(reader.pages) == 3
        assert "123/2567" in reader.pages[1].extract_text()
        assert "123/2567" not in reader.pages[0].extract_text()

    def test_out_of_range_page_clamped_to_last(self, service, pdf_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, target_page=99)))
        assert "123/2567" in reader.pages[2].extract_text()

    def test_page_zero_clamped_to_first(self, service, pdf_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, target_page=0)))
        assert "123/2567" in reader.pages[0].extract_text()

    def test_with_logo(self, service, pdf_blob, png_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, org_logo=png_blob)))
        assert len(reader.pages[0].images) == 1

    def test_broken_logo_is_skipped(self, service, pdf_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, org_logo=BROKEN_IMAGE)))

        assert len(reader.pages[0].images) == 0
        text = reader.pages[0].extract_text()
        assert "School" in text
        assert "123/2567" in text

    def test_corrupt_source(self, service):
        with pytest.raises(CorruptDocument):
            service.stamp_receive_number(self._request("data:application/pdf;base64,bm90IGEgcGRm"))

    def test_undecodable_source(self, service):
        with pytest.raises(CorruptDocument):
            service.stamp_receive_number(self._request("data:application/pdf;base64,@@@"))

    def test_font_failure_propagates(self, pdf_blob):
        service = StampService(FontCache(font_name="MissingThaiFont"))
        with pytest.raises(FontUnavailable):
            service.stamp_receive_number(self._request(pdf_blob))

    def test_date_rendered_in_buddhist_era(self, service, pdf_blob):
        reader = _reader(service.stamp_receive_number(self._request(pdf_blob, registry_number="R-1")))
        text = reader.pages[0].extract_text()

        assert "2567" in text
        assert "2024" not in text
        assert "10:30" in text

    def test_iso_string_and_clock_time(self, service, pdf_blob):
        request = self._request(pdf_blob, registry_number="R-2", date="2023-12-31", time=time(9, 5))
        text = _reader(service.stamp_receive_number(request)).pages[0].extract_text()

        assert "2566" in text
        assert "09:05" in text

    def test_unparseable_date_renders_placeholder(self, service, pdf_blob):
        request = self._request(pdf_blob, registry_number="R-3", date="someday")
        text = _reader(service.stamp_receive_number(request)).pages[0].extract_text()
        assert "...................." in text


class TestMeasureCommandBox:
    """Test suite for command box geometry."""

    def test_single_line_height(self, font):
        box = measure_command_box("OK", A4_WIDTH, font)
        assert box.height == pytest.approx(COMMAND_LINE_HEIGHT + SIGNATURE_BLOCK_HEIGHT + BOX_PADDING)
        assert box.lines == ["OK"]

    def test_minimum_height_floor(self, font, monkeypatch):
        monkeypatch.setattr(stamp_service, "SIGNATURE_BLOCK_HEIGHT", 10)
        monkeypatch.setattr(stamp_service, "BOX_PADDING", 0)

        assert measure_command_box("", A4_WIDTH, font).height == pytest.approx(MIN_BOX_HEIGHT)
        assert measure_command_box("OK", A4_WIDTH, font).height == pytest.approx(MIN_BOX_HEIGHT)

    def test_height_grows_with_text(self, font):
        heights = [
            measure_command_box("ทราบและดำเนินการ" * n, A4_WIDTH, font).height
            for n in (1, 5, 20, 60)
        ]
        assert heights == sorted(heights)
        assert heights[-1] > MIN_BOX_HEIGHT

    def test_right_alignment(self, font):
        box = measure_command_box("OK", A4_WIDTH, font, StampAlignment.RIGHT)
        assert box.x == pytest.approx(A4_WIDTH - COMMAND_BOX_WIDTH - COMMAND_MARGIN)
        assert box.y == pytest.approx(COMMAND_MARGIN)

    def test_left_alignment(self, font):
        box = measure_command_box("OK", A4_WIDTH, font, StampAlignment.LEFT)
        assert box.x == pytest.approx(COMMAND_MARGIN)

    def test_alignment_from_string(self, font):
        assert measure_command_box("OK", A4_WIDTH, font, "left").x == pytest.approx(COMMAND_MARGIN)

    def test_empty_text(self, font):
        box = measure_command_box("", A4_WIDTH, font)
        assert box.lines == []
        assert box.height == pytest.approx(SIGNATURE_BLOCK_HEIGHT + BOX_PADDING)


class TestCommandStamp:
    """Test suite for the command stamp."""

    def test_blank_page_when_no_source(self, service):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="APPROVED FOR ACTION",
            signer_name="Somchai",
            signer_title="Director",
            stamp_date=date(2024, 1, 1),
        )))

        assert len(reader.pages) == 1
        text = reader.pages[0].extract_text()
        assert "APPROVED FOR ACTION" in text
        assert "( Somchai )" in text
        assert "Director" in text
        assert "2567" in text

    def test_existing_pdf(self, service, pdf_blob):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="FORWARD", signer_name="Somchai", source=pdf_blob, target_page=3,
        )))
        assert len(reader.pages) == 3
        assert "FORWARD" in reader.pages[2].extract_text()

    def test_image_source_wrapped_on_a4(self, service, png_blob):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="NOTED", signer_name="Somchai", source=png_blob,
        )))

        assert len(reader.pages) == 1
        assert float(reader.pages[0].mediabox.width) == pytest.approx(A4_WIDTH)
        assert len(reader.pages[0].images) == 1

    def test_explicit_media_type_wins(self, service, png_bytes):
        bare = encode(png_bytes).split(",", 1)[1]
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="NOTED", signer_name="Somchai", source=bare, source_media_type="image/png",
        )))
        assert len(reader.pages[0].images) == 1

    def test_unreadable_image_source(self, service):
        buffer = BytesIO()
        Image.new("P", (10, 10)).save(buffer, format="GIF")
        with pytest.raises(CorruptDocument):
            service.stamp_command(CommandStampRequest(
                command_text="NOTED", signer_name="Somchai", source=encode(buffer.getvalue(), "image/gif"),
            ))

    def test_signature_drawn(self, service, png_blob):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="APPROVED", signer_name="Somchai", signature_image=png_blob,
        )))
        assert len(reader.pages[0].images) == 1

    def test_oversized_image_source(self, service, oversized_png_bytes):
        with pytest.raises(CorruptDocument):
            service.stamp_command(CommandStampRequest(
                command_text="NOTED", signer_name="Somchai", source=encode(oversized_png_bytes, "image/png"),
            ))

    def test_org_logo_drawn(self, service, png_blob, other_png_blob):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="APPROVED", signer_name="Somchai", org_logo=other_png_blob, signature_image=png_blob,
        )))
        assert len(reader.pages[0].images) == 2
        assert "( Somchai )" in reader.pages[0].extract_text()

    def test_broken_org_logo_skipped(self, service):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="APPROVED", signer_name="Somchai", org_logo=BROKEN_IMAGE,
        )))
        assert len(reader.pages[0].images) == 0
        assert "( Somchai )" in reader.pages[0].extract_text()

    def test_broken_signature_skipped(self, service):
        reader = _reader(service.stamp_command(CommandStampRequest(
            command_text="APPROVED", signer_name="Somchai", signature_image=BROKEN_IMAGE,
        )))
        assert len(reader.pages[0].images) == 0
        assert "( Somchai )" in reader.pages[0].extract_text()

    def test_counter_signature_on_stamped_page(self, service, pdf_blob):
        first = service.stamp_command(CommandStampRequest(
            command_text="PRIMARY", signer_name="Director", source=pdf_blob,
        ))
        second = service.stamp_command(CommandStampRequest(
            command_text="DEPUTY", signer_name="Deputy", source=encode(first),
            alignment=StampAlignment.LEFT,
        ))

        text = _reader(second).pages[0].extract_text()
        assert "PRIMARY" in text
        assert "DEPUTY" in text
