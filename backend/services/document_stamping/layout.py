"""
Text Layout Engine
==================
Line breaking against measured glyph widths.

Thai has no spaces between words, so the Thai strategy breaks between
characters: it grows the line one character at a time while the measured
width stays under the limit. Combining marks (above/below vowels, tone
marks) stay with the character they sit on.

Layout is pure: it only measures through FontHandle.width and never draws.
"""

import unicodedata
from typing import Callable, Dict, Iterable, List

from .fonts import FontHandle

LineBreaker = Callable[[str, float, float, FontHandle], List[str]]


def clusters(text: str) -> Iterable[str]:
    """Split text into base characters with their trailing combining marks."""
    current = ""
    for ch in text:
        if current and unicodedata.category(ch) == "Mn":
            current += ch
            continue
        if current:
            yield current
        current = ch
    if current:
        yield current


def break_by_character(text: str, max_width: float, font_size: float, font: FontHandle) -> List[str]:
    """Break a single segment (no newlines) between characters."""
    lines: List[str] = []
    current = ""
    for cluster in clusters(text):
        if not current or font.width(current + cluster, font_size) < max_width:
            current += cluster
        else:
            lines.append(current)
            current = cluster
    lines.append(current)
    return lines


def break_by_whitespace(text: str, max_width: float, font_size: float, font: FontHandle) -> List[str]:
    """
    Break a single segment after spaces. Words wider than the line fall
    back to character breaking. Spaces stay at the end of their line.
    """
    words: List[str] = []
    for token in text.split(" "):
        words.append(token + " ")
    words[-1] = words[-1][:-1]

    lines: List[str] = []
    current = ""
    for word in words:
        if not word:
            continue
        if not current or font.width(current + word.rstrip(" "), font_size) < max_width:
            current += word
            continue
        lines.append(current)
        current = ""
        if font.width(word.rstrip(" "), font_size) >= max_width:
            pieces = break_by_character(word, max_width, font_size, font)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        else:
            current = word
    lines.append(current)
    return lines


STRATEGIES: Dict[str, LineBreaker] = {
    "th": break_by_character,
    "en": break_by_whitespace,
}


def wrap(text: str, max_width: float, font_size: float, font: FontHandle, locale: str = "th") -> List[str]:
    """
    Wrap text into lines no wider than max_width.

    "\\n" is a hard break; each segment is then broken with the strategy
    registered for locale. Empty segments give empty lines, empty text
    gives no lines. Joining the result reproduces text without its "\\n".
    """
    if not text:
        return []
    breaker = STRATEGIES.get(locale, break_by_character)
    lines: List[str] = []
    for segment in text.split("\n"):
        if not segment:
            lines.append("")
            continue
        lines.extend(breaker(segment, max_width, font_size, font))
    return lines


def wrap_paragraph(
    text: str,
    max_width: float,
    indent: float,
    font_size: float,
    font: FontHandle,
    locale: str = "th",
) -> List[str]:
    """
    Wrap a paragraph whose first line is indented.

    The first line is fitted to max_width - indent, the rest flows at
    max_width. The caller draws lines[0] at x + indent.
    """
    first = wrap(text, max_width - indent, font_size, font, locale)
    if not first:
        return []
    head = first[0]
    rest = text[len(head):]
    if rest.startswith("\n"):
        rest = rest[1:]
    elif not rest:
        return [head]
    return [head] + wrap(rest, max_width, font_size, font, locale)
