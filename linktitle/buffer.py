"""Host capabilities the engine relies on, plus an in-memory host.

The engine never reaches for a global editor. Hosts hand it a
``TextBuffer`` and, for the paste command, a ``ClipboardSource``.
``InMemoryBuffer`` implements the buffer over a plain string and is what
the tests and headless tooling drive.
"""

from __future__ import annotations

from typing import Protocol

from .engine.patcher import offset_to_position, position_to_offset
from .engine.types import Position


class TextBuffer(Protocol):
    def get_cursor(self) -> Position: ...

    def get_selection(self) -> str: ...

    def set_selection(self, start: Position, end: Position) -> None: ...

    def replace_selection(self, text: str) -> None: ...

    def replace_range(self, text: str, start: Position, end: Position) -> None: ...

    def get_full_text(self) -> str: ...

    def get_line(self, line: int) -> str: ...


class ClipboardSource(Protocol):
    async def read_text(self) -> str: ...


class InMemoryBuffer:
    """A ``TextBuffer`` backed by a string.

    The selection is kept as a pair of linear offsets; ``anchor == head``
    means nothing is selected and the cursor sits at ``head``.
    """

    def __init__(self, text: str = "", cursor: int | None = None) -> None:
        self.text = text
        self.anchor = self.head = len(text) if cursor is None else cursor

    def get_cursor(self) -> Position:
        return offset_to_position(self.text, self.head)

    def get_selection(self) -> str:
        start, end = sorted((self.anchor, self.head))
        return self.text[start:end]

    def set_selection(self, start: Position, end: Position) -> None:
        self.anchor = position_to_offset(self.text, start)
        self.head = position_to_offset(self.text, end)

    def select(self, start: int, end: int) -> None:
        """Select by linear offsets."""

        self.anchor, self.head = start, end

    def replace_selection(self, text: str) -> None:
        start, end = sorted((self.anchor, self.head))
        self.text = self.text[:start] + text + self.text[end:]
        self.anchor = self.head = start + len(text)

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        begin = position_to_offset(self.text, start)
        finish = position_to_offset(self.text, end)
        self.text = self.text[:begin] + text + self.text[finish:]
        self.anchor = self._shift(self.anchor, begin, finish, len(text))
        self.head = self._shift(self.head, begin, finish, len(text))

    def insert(self, offset: int, text: str) -> None:
        """Insert ``text`` at ``offset`` the way a user typing there would."""

        self.text = self.text[:offset] + text + self.text[offset:]
        if self.anchor >= offset:
            self.anchor += len(text)
        if self.head >= offset:
            self.head += len(text)

    def get_full_text(self) -> str:
        return self.text

    def get_line(self, line: int) -> str:
        lines = self.text.split("\n")
        return lines[line] if 0 <= line < len(lines) else ""

    @staticmethod
    def _shift(offset: int, begin: int, finish: int, inserted: int) -> int:
        if offset >= finish:
            return offset + inserted - (finish - begin)
        if offset > begin:
            return begin + inserted
        return offset


class StaticClipboard:
    """A ``ClipboardSource`` returning a fixed string."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    async def read_text(self) -> str:
        return self.text
