"""
Leave Type Catalogue
====================
Form titles, display names and statistics-table rows per leave type.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class LeaveType(str, Enum):
    """Leave categories known to the forms."""
    SICK = "Sick"
    PERSONAL = "Personal"
    MATERNITY = "Maternity"
    LATE = "Late"
    OFF_CAMPUS = "OffCampus"


DAY_LEAVE_TITLE = "แบบใบลาป่วย ลาคลอดบุตร ลากิจส่วนตัว"


@dataclass
class LeaveTemplate:
    """How one leave type is presented on forms and reports."""
    type: LeaveType
    name_th: str          # used after "ขออนุญาต" / "ขอลา"
    short_name_th: str    # statistics table row / report column
    form_title: str
    time_scoped: bool = False
    table_rows: List[LeaveType] = field(default_factory=list)


_DAY_ROWS = [LeaveType.SICK, LeaveType.PERSONAL, LeaveType.MATERNITY]

TEMPLATES: Dict[LeaveType, LeaveTemplate] = {
    LeaveType.SICK: LeaveTemplate(
        type=LeaveType.SICK,
        name_th="ป่วย",
        short_name_th="ป่วย",
        form_title=DAY_LEAVE_TITLE,
        table_rows=_DAY_ROWS,
    ),
    LeaveType.PERSONAL: LeaveTemplate(
        type=LeaveType.PERSONAL,
        name_th="กิจส่วนตัว",
        short_name_th="กิจส่วนตัว",
        form_title=DAY_LEAVE_TITLE,
        table_rows=_DAY_ROWS,
    ),
    LeaveType.MATERNITY: LeaveTemplate(
        type=LeaveType.MATERNITY,
        name_th="คลอดบุตร",
        short_name_th="คลอดบุตร",
        form_title=DAY_LEAVE_TITLE,
        table_rows=_DAY_ROWS,
    ),
    LeaveType.LATE: LeaveTemplate(
        type=LeaveType.LATE,
        name_th="เข้าสาย",
        short_name_th="สาย",
        form_title="แบบขออนุญาตเข้าสาย",
        time_scoped=True,
        table_rows=[LeaveType.LATE],
    ),
    LeaveType.OFF_CAMPUS: LeaveTemplate(
        type=LeaveType.OFF_CAMPUS,
        name_th="ออกนอกบริเวณ",
        short_name_th="ออกนอก",
        form_title="แบบขออนุญาตออกนอกบริเวณโรงเรียน",
        time_scoped=True,
        table_rows=[LeaveType.OFF_CAMPUS],
    ),
}

# Column order of the leave summary report
SUMMARY_COLUMNS: List[LeaveType] = [
    LeaveType.SICK,
    LeaveType.PERSONAL,
    LeaveType.MATERNITY,
    LeaveType.LATE,
    LeaveType.OFF_CAMPUS,
]


class TemplateManager:
    """Lookup over the leave type catalogue."""

    def get_template(self, leave_type) -> Optional[LeaveTemplate]:
        """Get a template by LeaveType or its string value."""
        try:
            return TEMPLATES.get(LeaveType(leave_type))
        except ValueError:
            return None

    def require(self, leave_type) -> LeaveTemplate:
        template = self.get_template(leave_type)
        if template is None:
            raise ValueError(f"Unknown leave type: {leave_type!r}")
        return template

    def list_templates(self, time_scoped: Optional[bool] = None) -> List[LeaveTemplate]:
        """List all templates, optionally filtered by time-scoped vs day-based."""
        templates = list(TEMPLATES.values())
        if time_scoped is not None:
            templates = [t for t in templates if t.time_scoped == time_scoped]
        return templates
