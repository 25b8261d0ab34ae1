"""Locate the link or URL token surrounding the cursor."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .classify import LINE_HTML_LINK_RE, LINE_MARKDOWN_LINK_RE, LINE_URL_RE
from .types import Position, Span

if TYPE_CHECKING:
    from ..buffer import TextBuffer

# Scanned in order; links first so a URL inside a link selects the whole link.
_LINE_PATTERNS = (LINE_MARKDOWN_LINK_RE, LINE_HTML_LINK_RE, LINE_URL_RE)


def cursor_within(column: int, match: re.Match[str]) -> bool:
    return match.start() <= column <= match.end()


def resolve_span(line_text: str, cursor: Position) -> Span:
    """Return the span of the link or URL containing ``cursor``.

    Falls back to a zero-width span at the cursor when nothing matches.
    """

    for pattern in _LINE_PATTERNS:
        for match in pattern.finditer(line_text):
            if cursor_within(cursor.column, match):
                return Span(
                    start=Position(cursor.line, match.start()),
                    end=Position(cursor.line, match.end()),
                )
    return Span(start=cursor, end=cursor)


def selected_text(buffer: "TextBuffer") -> str:
    """Return the selection, first selecting the token under the cursor if empty."""

    if not buffer.get_selection():
        cursor = buffer.get_cursor()
        span = resolve_span(buffer.get_line(cursor.line), cursor)
        buffer.set_selection(span.start, span.end)
    return buffer.get_selection()
