"""Find a placeholder in the live buffer and swap in the final title."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .types import Position, Span

if TYPE_CHECKING:
    from ..buffer import TextBuffer

logger = logging.getLogger(__name__)


def offset_to_position(text: str, index: int) -> Position:
    """Convert a linear offset into a line/column position."""

    line = text.count("\n", 0, index)
    line_start = text.rfind("\n", 0, index) + 1
    return Position(line=line, column=index - line_start)


def position_to_offset(text: str, position: Position) -> int:
    """Convert a line/column position into a linear offset, clamped to the line."""

    offset = 0
    for _ in range(position.line):
        newline = text.find("\n", offset)
        if newline == -1:
            return len(text)
        offset = newline + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return min(offset + max(position.column, 0), line_end)


def locate_token(text: str, token: str) -> Optional[Span]:
    """Return the span of the first occurrence of ``token`` in ``text``."""

    if not token:
        return None
    start = text.find(token)
    if start == -1:
        return None
    return Span(
        start=offset_to_position(text, start),
        end=offset_to_position(text, start + len(token)),
    )


def commit(buffer: "TextBuffer", token: str, replacement: str) -> Optional[Span]:
    """Replace ``token`` in ``buffer`` with ``replacement``.

    The buffer is read here rather than when the placeholder was written,
    since the user may have edited it in between. Returns the replaced span,
    or ``None`` when the token is gone, in which case nothing is written.
    """

    span = locate_token(buffer.get_full_text(), token)
    if span is None:
        logger.info("Placeholder %r no longer in buffer; dropping title %r", token, replacement)
        return None
    buffer.replace_range(replacement, span.start, span.end)
    return span
