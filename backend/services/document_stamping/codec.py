"""
Binary Codec
============
Converts between data-URI / base64 strings and raw bytes.

Every byte payload (source PDFs, logos, signatures, results) crosses the
engine boundary in this form.
"""

import base64
import binascii
import re
from typing import Optional

from core.logger import get_logger

log = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

_WHITESPACE = re.compile(r"\s+")
_DATA_URI_HEADER = re.compile(r"^data:([^;,]+)")


def decode(text: Optional[str]) -> bytes:
    """
    Decode a data URI or bare base64 string.

    Everything up to the first comma is treated as the prefix. Whitespace
    inside the payload is ignored. Malformed input gives b"".
    """
    if not text:
        return b""
    if not isinstance(text, str):
        log.warning(f"Cannot decode payload of type {type(text).__name__}")
        return b""

    payload = text.split(",", 1)[1] if "," in text else text
    payload = _WHITESPACE.sub("", payload)
    payload += "=" * (-len(payload) % 4)

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        log.warning(f"Malformed base64 payload ({len(text)} chars): {e}")
        return b""


def encode(data: bytes, media_type: str = PDF_MEDIA_TYPE) -> str:
    """Encode bytes as a self-describing data URI."""
    return f"data:{media_type};base64,{base64.b64encode(bytes(data)).decode('ascii')}"


def media_type_of(text: Optional[str]) -> Optional[str]:
    """Media type declared by a data-URI prefix, if there is one."""
    if not text:
        return None
    match = _DATA_URI_HEADER.match(text.strip())
    return match.group(1).lower() if match else None
