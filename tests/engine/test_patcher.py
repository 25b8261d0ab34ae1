"""Placeholder location and commit tests."""

from __future__ import annotations

from linktitle.buffer import InMemoryBuffer
from linktitle.engine.patcher import commit, locate_token, offset_to_position, position_to_offset
from linktitle.engine.types import Position, Span


def test_offset_to_position_across_lines():
    text = "one\ntwo\nthree"
    assert offset_to_position(text, 0) == Position(0, 0)
    assert offset_to_position(text, 3) == Position(0, 3)
    assert offset_to_position(text, 4) == Position(1, 0)
    assert offset_to_position(text, 10) == Position(2, 2)


def test_position_to_offset_inverts_and_clamps():
    text = "one\ntwo\nthree"
    for index in range(len(text) + 1):
        assert position_to_offset(text, offset_to_position(text, index)) == index
    assert position_to_offset(text, Position(0, 99)) == 3
    assert position_to_offset(text, Position(9, 0)) == len(text)


def test_locate_first_occurrence():
    text = "intro\n[Fetching Title#ab12](https://x.com) and Fetching Title#ab12"
    span = locate_token(text, "Fetching Title#ab12")
    assert span == Span(Position(1, 1), Position(1, 20))


def test_commit_replaces_token_found_after_edits():
    buffer = InMemoryBuffer("[Fetching Title#ab12](https://example.com)")
    buffer.insert(0, "Typed while waiting\n\n")

    span = commit(buffer, "Fetching Title#ab12", "Example Domain")

    assert span == Span(Position(2, 1), Position(2, 20))
    assert buffer.get_full_text() == "Typed while waiting\n\n[Example Domain](https://example.com)"


def test_commit_is_a_no_op_when_token_is_gone():
    buffer = InMemoryBuffer("[Fetching Title#ab12](https://example.com)")
    buffer.select(1, 20)
    buffer.replace_selection("My own label")
    before = buffer.get_full_text()

    assert commit(buffer, "Fetching Title#ab12", "Example Domain") is None
    assert buffer.get_full_text() == before
