"""
Stamping Request Models
=======================
Plain request values passed to the stamp renderers and composers.

Byte payloads (documents, logos, signatures, emblems) are EncodedBlob
strings: data URIs or bare base64.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from .templates import LeaveType
from .thai import DateLike, TimeLike

EncodedBlob = str


class StampAlignment(str, Enum):
    """
    Horizontal anchor of a command stamp. RIGHT is the primary approver,
    LEFT a subordinate counter-signature on the same page.
    """
    LEFT = "left"
    RIGHT = "right"


class ApprovalOutcome(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PENDING = "Pending"


@dataclass
class ReceiveNumberRequest:
    """Registry-number stamp for an incoming document."""
    source: EncodedBlob
    registry_number: str
    date: DateLike
    time: TimeLike
    org_name: str = ""
    org_logo: Optional[EncodedBlob] = None
    target_page: int = 1


@dataclass
class CommandStampRequest:
    """
    Command/signature stamp. source=None synthesizes a blank A4 page.
    source_media_type falls back to the data-URI prefix, then to PDF.
    """
    command_text: str
    signer_name: str
    signer_title: str = ""
    source: Optional[EncodedBlob] = None
    source_media_type: Optional[str] = None
    target_page: int = 1
    signature_image: Optional[EncodedBlob] = None
    org_name: str = ""
    signature_scale: float = 1.0
    signature_y_offset: float = 0.0
    alignment: StampAlignment = StampAlignment.RIGHT
    stamp_date: Optional[date] = None
    org_logo: Optional[EncodedBlob] = None


@dataclass
class PersonIdentity:
    name: str
    title: str = ""
    org: str = ""


@dataclass
class LeaveTally:
    """
    Counts shown in one statistics-table row. The three values are taken
    as given; nothing checks that cumulative == prior + this_time.
    """
    prior: float = 0
    this_time: float = 0
    cumulative: float = 0

    @classmethod
    def additive(cls, prior: float, this_time: float) -> "LeaveTally":
        return cls(prior=prior, this_time=this_time, cumulative=prior + this_time)


@dataclass
class LastLeave:
    start_date: DateLike = None
    end_date: DateLike = None
    days: Optional[float] = None


@dataclass
class LeaveFormRequest:
    requester: PersonIdentity
    leave_type: LeaveType
    start_date: DateLike = None
    end_date: DateLike = None
    reason: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days: Optional[float] = None
    contact_info: str = ""
    phone: str = ""
    last_leave: Optional[LastLeave] = None
    statistics: Dict[LeaveType, LeaveTally] = field(default_factory=dict)
    outcome: ApprovalOutcome = ApprovalOutcome.PENDING
    approver: PersonIdentity = field(default_factory=lambda: PersonIdentity("", "ผู้อำนวยการโรงเรียน"))
    approved_date: DateLike = None
    written_date: DateLike = None
    requester_signature: Optional[EncodedBlob] = None
    approver_signature: Optional[EncodedBlob] = None
    approver_signature_scale: float = 1.0
    approver_signature_y_offset: float = 0.0
    emblem: Optional[EncodedBlob] = None
    thai_digits: bool = False


@dataclass
class StaffLeaveRecord:
    name: str
    title: str = ""
    counts: Dict[LeaveType, float] = field(default_factory=dict)


@dataclass
class SummaryReportRequest:
    org_name: str
    period: str
    staff: List[StaffLeaveRecord]
    approver: PersonIdentity
    reference_number: str = ""
    report_date: DateLike = None
    intro_text: Optional[str] = None
    approver_signature: Optional[EncodedBlob] = None
    approver_signature_scale: float = 1.0
    approver_signature_y_offset: float = 0.0
    emblem: Optional[EncodedBlob] = None
    thai_digits: bool = False
