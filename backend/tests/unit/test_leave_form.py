"""
Leave Form Tests
================
Unit tests for the leave request form composer.
"""

import sys
from datetime import date
from io import BytesIO
from pathlib import Path

import pytest
from pypdf import PdfReader

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from services.document_stamping.codec import encode
from services.document_stamping.fonts import AssetCache
from services.document_stamping.leave_form import LeaveFormComposer
from services.document_stamping.models import (
    ApprovalOutcome,
    LastLeave,
    LeaveFormRequest,
    LeaveTally,
    PersonIdentity,
)
from services.document_stamping.templates import LeaveType


@pytest.fixture
def composer(fonts):
    return LeaveFormComposer(fonts, AssetCache(), emblem_url="")


def _request(**overrides) -> LeaveFormRequest:
    values = dict(
        requester=PersonIdentity(name="Somsri Jaidee", title="Instructor", org="Ban Nong School"),
        leave_type=LeaveType.SICK,
        start_date=date(2024, 6, 3),
        end_date=date(2024, 6, 4),
        reason="fever",
        days=2,
        contact_info="home",
        phone="-",
        last_leave=LastLeave(date(2024, 2, 1), date(2024, 2, 1), 1),
        statistics={
            LeaveType.SICK: LeaveTally.additive(1, 2),
            LeaveType.PERSONAL: LeaveTally(prior=3, this_time=0, cumulative=3),
        },
        approver=PersonIdentity(name="Director Boss", title="Director"),
        approved_date=date(2024, 6, 5),
        written_date=date(2024, 6, 1),
    )
    values.update(overrides)
    return LeaveFormRequest(**values)


def _reader(data: bytes) -> PdfReader:
    return PdfReader(BytesIO(data))


class TestLeaveForm:
    """Test suite for LeaveFormComposer."""

    def test_single_a4_page(self, composer):
        reader = _reader(composer.compose(_request()))
        assert len(reader.pages) == 1
        assert float(reader.pages[0].mediabox.height) == pytest.approx(841.89)

    def test_identity_and_dates(self, composer):
        text = _reader(composer.compose(_request())).pages[0].extract_text()
        assert "Somsri Jaidee" in text
        assert "Director Boss" in text
        assert "2567" in text

    def test_approved_draws_approver_signature(self, composer, png_blob):
        request = _request(outcome=ApprovalOutcome.APPROVED, approver_signature=png_blob)
        assert len(_reader(composer.compose(request)).pages[0].images) == 1

    @pytest.mark.parametrize("outcome", [ApprovalOutcome.REJECTED, ApprovalOutcome.PENDING])
    def test_signature_only_when_approved(self, composer, png_blob, outcome):
        request = _request(outcome=outcome, approver_signature=png_blob)
        assert len(_reader(composer.compose(request)).pages[0].images) == 0

    def test_broken_approver_signature_skipped(self, composer):
        request = _request(outcome=ApprovalOutcome.APPROVED, approver_signature="data:image/png;base64,AAAA")
        assert len(_reader(composer.compose(request)).pages[0].images) == 0

    def test_requester_signature_and_emblem(self, composer, png_blob, other_png_blob):
        request = _request(requester_signature=png_blob, emblem=other_png_blob)
        assert len(_reader(composer.compose(request)).pages[0].images) == 2

    def test_oversized_emblem_skipped(self, composer, oversized_png_bytes):
        request = _request(emblem=encode(oversized_png_bytes, "image/png"))
        page = _reader(composer.compose(request)).pages[0]
        assert len(page.images) == 0
        assert "Somsri Jaidee" in page.extract_text()

    @pytest.mark.parametrize("leave_type", list(LeaveType))
    def test_every_leave_type(self, composer, leave_type):
        request = _request(leave_type=leave_type, start_time="08:00", end_time="10:30")
        assert len(_reader(composer.compose(request)).pages) == 1

    def test_leave_type_from_string(self, composer):
        assert composer.compose(_request(leave_type="OffCampus"))

    def test_unknown_leave_type(self, composer):
        with pytest.raises(ValueError):
            composer.compose(_request(leave_type="Vacation"))

    def test_missing_optional_data(self, composer):
        request = LeaveFormRequest(
            requester=PersonIdentity(name="Somsri Jaidee"),
            leave_type=LeaveType.PERSONAL,
        )
        text = _reader(composer.compose(request)).pages[0].extract_text()
        assert "...................." in text

    def test_thai_digits(self, composer):
        text = _reader(composer.compose(_request(thai_digits=True))).pages[0].extract_text()
        assert "2567" not in text
