"""
Thai Locale Helpers
===================
Digit localization and Buddhist-era date formatting.
"""

from datetime import date, datetime, time
from typing import Optional, Tuple, Union

from core.logger import get_logger

log = get_logger(__name__)

BUDDHIST_ERA_OFFSET = 543
DATE_PLACEHOLDER = "...................."

THAI_MONTHS = [
    "มกราคม", "กุมภาพันธ์", "มีนาคม", "เมษายน", "พฤษภาคม", "มิถุนายน",
    "กรกฎาคม", "สิงหาคม", "กันยายน", "ตุลาคม", "พฤศจิกายน", "ธันวาคม",
]

_THAI_DIGITS = str.maketrans("0123456789", "๐๑๒๓๔๕๖๗๘๙")

DateLike = Union[date, datetime, str, None]
TimeLike = Union[time, datetime, str, None]


def localize_digits(value) -> str:
    """Replace ASCII digits with Thai digits. Other characters are kept."""
    return str(value).translate(_THAI_DIGITS)


def _to_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        log.warning(f"Unparseable date {text!r}, rendering placeholder")
        return None


def date_parts(value: DateLike) -> Optional[Tuple[int, str, int]]:
    """(day, Thai month name, Buddhist-era year), or None for a missing date."""
    d = _to_date(value)
    if d is None:
        return None
    return d.day, THAI_MONTHS[d.month - 1], d.year + BUDDHIST_ERA_OFFSET


def format_date(value: DateLike, localized_digits: bool = False) -> str:
    """
    Format a Gregorian date as "<day> <month> <BE year>".

    Example:
        >>> format_date(date(2024, 1, 1))
        '1 มกราคม 2567'
    """
    parts = date_parts(value)
    if parts is None:
        return DATE_PLACEHOLDER
    day, month, year = parts
    text = f"{day} {month} {year}"
    return localize_digits(text) if localized_digits else text


def format_date_long(value: DateLike, localized_digits: bool = False) -> str:
    """Official letter style: "วันที่ <d> เดือน <month> พ.ศ. <year>"."""
    parts = date_parts(value)
    if parts is None:
        return f"วันที่ {DATE_PLACEHOLDER}"
    day, month, year = parts
    text = f"วันที่ {day} เดือน {month} พ.ศ. {year}"
    return localize_digits(text) if localized_digits else text


def format_count(value, localized_digits: bool = False) -> str:
    """Whole numbers without a decimal part; None renders as "-"."""
    if value is None:
        return "-"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    return localize_digits(text) if localized_digits else text


def format_time(value: TimeLike, localized_digits: bool = False) -> str:
    """Render a clock time as "HH:MM น."; empty input gives ""."""
    if value is None or value == "":
        return ""
    if isinstance(value, (time, datetime)):
        text = value.strftime("%H:%M")
    else:
        text = str(value).strip()[:5]
    text = f"{text} น."
    return localize_digits(text) if localized_digits else text
