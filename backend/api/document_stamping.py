"""
Document Stamping API
=====================
Endpoints for stamping and composing Thai official documents.

POST /api/stamping/receive-number - Registry-number stamp
POST /api/stamping/command - Command/signature stamp
POST /api/stamping/leave-form - Leave request form
POST /api/stamping/leave-summary - Multi-page leave summary report
GET /api/stamping/leave-types - Leave type catalogue
"""

from datetime import date, time
from typing import Callable, Dict, List, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from core.logger import get_logger
from services.document_stamping import (
    ApprovalOutcome,
    AssetFetchTimeout,
    AssetUnavailable,
    CommandStampRequest,
    CorruptDocument,
    DocumentGenerator,
    LastLeave,
    LeaveFormRequest,
    LeaveTally,
    LeaveType,
    PersonIdentity,
    ReceiveNumberRequest,
    StaffLeaveRecord,
    StampAlignment,
    SummaryReportRequest,
    TemplateManager,
)
from services.document_stamping.codec import PDF_MEDIA_TYPE

log = get_logger(__name__)

router = APIRouter(prefix="/api/stamping", tags=["Document Stamping"])

template_manager = TemplateManager()
_generator: Optional[DocumentGenerator] = None


def get_generator() -> DocumentGenerator:
    """Shared engine instance. Override in tests via app.dependency_overrides."""
    global _generator
    if _generator is None:
        _generator = DocumentGenerator()
    return _generator


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class ReceiveNumberBody(BaseModel):
    """Request for a registry-number stamp."""
    source: str
    registry_number: str
    date: date
    time: time
    org_name: str = ""
    org_logo: Optional[str] = None
    target_page: int = 1

    def to_request(self) -> ReceiveNumberRequest:
        return ReceiveNumberRequest(**self.model_dump())


class CommandStampBody(BaseModel):
    """Request for a command/signature stamp. No source gives a blank A4 page."""
    command_text: str
    signer_name: str
    signer_title: str = ""
    source: Optional[str] = None
    source_media_type: Optional[str] = None
    target_page: int = 1
    signature_image: Optional[str] = None
    org_name: str = ""
    signature_scale: float = Field(default=1.0, gt=0)
    signature_y_offset: float = 0.0
    alignment: StampAlignment = StampAlignment.RIGHT
    stamp_date: Optional[date] = None
    org_logo: Optional[str] = None

    def to_request(self) -> CommandStampRequest:
        return CommandStampRequest(**self.model_dump())


class PersonBody(BaseModel):
    name: str
    title: str = ""
    org: str = ""


class LeaveTallyBody(BaseModel):
    prior: float = 0
    this_time: float = 0
    cumulative: float = 0


class LastLeaveBody(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days: Optional[float] = None


class LeaveFormBody(BaseModel):
    """Request for a leave request form. Dates are ISO strings."""
    requester: PersonBody
    leave_type: LeaveType
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days: Optional[float] = None
    contact_info: str = ""
    phone: str = ""
    last_leave: Optional[LastLeaveBody] = None
    statistics: Dict[LeaveType, LeaveTallyBody] = {}
    outcome: ApprovalOutcome = ApprovalOutcome.PENDING
    approver: Optional[PersonBody] = None
    approved_date: Optional[str] = None
    written_date: Optional[str] = None
    requester_signature: Optional[str] = None
    approver_signature: Optional[str] = None
    approver_signature_scale: float = Field(default=1.0, gt=0)
    approver_signature_y_offset: float = 0.0
    emblem: Optional[str] = None
    thai_digits: bool = False

    def to_request(self) -> LeaveFormRequest:
        data = self.model_dump(exclude={"requester", "last_leave", "statistics", "approver"})
        request = LeaveFormRequest(
            requester=PersonIdentity(**self.requester.model_dump()),
            last_leave=LastLeave(**self.last_leave.model_dump()) if self.last_leave else None,
            statistics={t: LeaveTally(**tally.model_dump()) for t, tally in self.statistics.items()},
            **data,
        )
        if self.approver is not None:
            request.approver = PersonIdentity(**self.approver.model_dump())
        return request


class StaffBody(BaseModel):
    name: str
    title: str = ""
    counts: Dict[LeaveType, float] = {}


class LeaveSummaryBody(BaseModel):
    """Request for the leave summary report."""
    org_name: str
    period: str
    staff: List[StaffBody] = []
    approver: PersonBody
    reference_number: str = ""
    report_date: Optional[str] = None
    intro_text: Optional[str] = None
    approver_signature: Optional[str] = None
    approver_signature_scale: float = Field(default=1.0, gt=0)
    approver_signature_y_offset: float = 0.0
    emblem: Optional[str] = None
    thai_digits: bool = False

    def to_request(self) -> SummaryReportRequest:
        data = self.model_dump(exclude={"staff", "approver"})
        return SummaryReportRequest(
            staff=[StaffLeaveRecord(**s.model_dump()) for s in self.staff],
            approver=PersonIdentity(**self.approver.model_dump()),
            **data,
        )


class StampingResponse(BaseModel):
    """A generated PDF as a data URI."""
    success: bool
    document: str
    media_type: str = PDF_MEDIA_TYPE


class LeaveTypeInfo(BaseModel):
    id: str
    name_th: str
    short_name_th: str
    form_title: str
    time_scoped: bool


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

T = TypeVar("T")


def _run(operation: Callable[[T], str], request: T, label: str) -> StampingResponse:
    """Run an engine operation and map engine errors to HTTP statuses."""
    try:
        document = operation(request)
    except CorruptDocument as e:
        log.warning(f"{label}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except AssetFetchTimeout as e:
        log.error(f"{label}: {e}")
        raise HTTPException(status_code=504, detail=str(e))
    except AssetUnavailable as e:
        log.error(f"{label}: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return StampingResponse(success=True, document=document)


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/receive-number", response_model=StampingResponse)
def stamp_receive_number(body: ReceiveNumberBody, generator: DocumentGenerator = Depends(get_generator)):
    """Stamp a registry number onto the target page of a PDF."""
    return _run(generator.stamp_receive_number, body.to_request(), "receive-number")


@router.post("/command", response_model=StampingResponse)
def stamp_command(body: CommandStampBody, generator: DocumentGenerator = Depends(get_generator)):
    """Stamp a command with signer block onto a PDF, an image or a blank page."""
    return _run(generator.stamp_command, body.to_request(), "command")


@router.post("/leave-form", response_model=StampingResponse)
def compose_leave_form(body: LeaveFormBody, generator: DocumentGenerator = Depends(get_generator)):
    """Compose a leave request form."""
    return _run(generator.compose_leave_form, body.to_request(), "leave-form")


@router.post("/leave-summary", response_model=StampingResponse)
def compose_leave_summary(body: LeaveSummaryBody, generator: DocumentGenerator = Depends(get_generator)):
    """Compose the leave summary report."""
    return _run(generator.compose_leave_summary, body.to_request(), "leave-summary")


@router.get("/leave-types", response_model=List[LeaveTypeInfo])
def list_leave_types(time_scoped: Optional[bool] = None):
    """
    List known leave types.

    Args:
        time_scoped: True for hour-based types (late, off-campus), False for day-based
    """
    return [
        LeaveTypeInfo(
            id=t.type.value,
            name_th=t.name_th,
            short_name_th=t.short_name_th,
            form_title=t.form_title,
            time_scoped=t.time_scoped,
        )
        for t in template_manager.list_templates(time_scoped)
    ]
