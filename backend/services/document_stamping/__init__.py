"""
Document Stamping Service
=========================
Stamps and composes Thai official documents as PDFs.

Supports:
- Registry-number and command/signature stamps on existing documents
- Leave request forms and multi-page leave summary reports
- Thai numerals and Buddhist-era dates
- Character-level line breaking for Thai text
"""

from .errors import (
    AssetFetchTimeout,
    AssetUnavailable,
    CorruptDocument,
    FontFetchTimeout,
    FontUnavailable,
    StampingError,
)
from .fonts import AssetCache, FontCache, FontHandle
from .generator import DocumentGenerator
from .models import (
    ApprovalOutcome,
    CommandStampRequest,
    EncodedBlob,
    LastLeave,
    LeaveFormRequest,
    LeaveTally,
    PersonIdentity,
    ReceiveNumberRequest,
    StaffLeaveRecord,
    StampAlignment,
    SummaryReportRequest,
)
from .stamp_service import StampService
from .templates import LeaveType, TemplateManager

__all__ = [
    'DocumentGenerator',
    'StampService',
    'TemplateManager',
    'FontCache',
    'FontHandle',
    'AssetCache',
    # Requests
    'ReceiveNumberRequest',
    'CommandStampRequest',
    'LeaveFormRequest',
    'SummaryReportRequest',
    'PersonIdentity',
    'LeaveTally',
    'LastLeave',
    'StaffLeaveRecord',
    'LeaveType',
    'ApprovalOutcome',
    'StampAlignment',
    'EncodedBlob',
    # Errors
    'StampingError',
    'CorruptDocument',
    'AssetUnavailable',
    'AssetFetchTimeout',
    'FontUnavailable',
    'FontFetchTimeout',
]
