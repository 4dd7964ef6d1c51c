"""Tests for control protocol parsing."""

from __future__ import annotations

import pytest

from logpeek.commands import (
    Cursor,
    Goto,
    Lines,
    Mark,
    Response,
    Search,
    SearchClear,
    SearchNext,
    SearchPrev,
    Size,
    Top,
    Unmark,
    parse_command,
    parse_range,
)
from logpeek.errors import InvalidArgumentError


class TestParseCommand:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("goto 500", Goto(500)),
            ("GOTO 7", Goto(7)),
            ("  goto\t12  ", Goto(12)),
            ("lines", Lines()),
            ("top", Top()),
            ("Size", Size()),
            ("cursor", Cursor()),
            ("cursor 42", Cursor(42)),
            ("mark 100 red", Mark(100, "red")),
            ("mark 100 light blue", Mark(100, "light blue")),
            ("mark 100 5-20 yellow", Mark(100, "yellow", (5, 20))),
            ("unmark 100", Unmark(100)),
            ("unmark 100 5-20", Unmark(100, (5, 20))),
            ("unmark 100 5-20 trailing words", Unmark(100, (5, 20))),
            ("search error", Search("error")),
            ("search connection   refused", Search("connection refused")),
            ("search-next", SearchNext()),
            ("SEARCH-PREV", SearchPrev()),
            ("search-clear", SearchClear()),
        ],
    )
    def test_valid(self, text: str, expected: object) -> None:
        assert parse_command(text) == expected

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("", "empty command"),
            ("   ", "empty command"),
            ("jump 5", "unknown command: jump"),
            ("goto", "usage: goto <line_number>"),
            ("goto 1 2", "usage: goto <line_number>"),
            ("goto abc", "invalid line number: abc"),
            ("goto -3", "invalid line number: -3"),
            ("goto 0", "line number must be >= 1"),
            ("cursor 1 2", "usage: cursor [<line_number>]"),
            ("lines 5", "usage: lines"),
            ("mark 5", "usage: mark <line_number> [<start>-<end>] <color>"),
            ("mark 5 3-9", "usage: mark <line_number> [<start>-<end>] <color>"),
            ("mark 5 0-3 red", "column numbers must be >= 1"),
            ("mark 5 9-3 red", "start column must be less than end column"),
            ("mark x red", "invalid line number: x"),
            ("unmark", "usage: unmark <line_number> [<start>-<end>]"),
            ("unmark 5 abc", "invalid range format: abc"),
            ("unmark 5 7", "invalid range format: 7"),
            ("unmark 5 5-x", "invalid range: 5-x"),
            ("unmark 5 0-3", "column numbers must be >= 1"),
            ("search", "usage: search <regex_pattern>"),
            ("search-next now", "usage: search-next"),
        ],
    )
    def test_errors(self, text: str, message: str) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_command(text)
        assert str(exc_info.value) == message

    def test_unknown_verb_is_lowercased(self) -> None:
        with pytest.raises(InvalidArgumentError, match="unknown command: frobnicate"):
            parse_command("FROBNICATE")


class TestParseRange:
    def test_range(self) -> None:
        assert parse_range("5-20") == (5, 20)

    @pytest.mark.parametrize("value", ["red", "5-", "-5", "5-x", "5"])
    def test_not_a_range(self, value: str) -> None:
        assert parse_range(value) is None


class TestResponse:
    def test_ok(self) -> None:
        assert str(Response.success()) == "OK"
        assert str(Response.success(1000)) == "OK 1000"
        assert str(Response.success("3 1 5")) == "OK 3 1 5"

    def test_error(self) -> None:
        response = Response.error("no active search")
        assert not response.ok
        assert str(response) == "ERROR no active search"
