"""Tests for cursor and viewport state."""

from __future__ import annotations

import pytest

from logpeek.errors import InvalidArgumentError, NotMarkedError, OutOfRangeError
from logpeek.view import ViewState


@pytest.fixture
def state() -> ViewState:
    return ViewState(line_count=1000, file_size=12_345, page_size=50)


class TestNavigation:
    def test_defaults(self, state: ViewState) -> None:
        assert state.cursor == 1
        assert state.top == 1
        assert state.bottom == 50

    def test_goto_moves_top_and_cursor(self, state: ViewState) -> None:
        state.goto(500)
        assert (state.top, state.cursor) == (500, 500)

    def test_goto_zero(self, state: ViewState) -> None:
        state.goto(10)
        with pytest.raises(InvalidArgumentError, match="line number must be >= 1"):
            state.goto(0)
        assert state.cursor == 10

    def test_goto_past_end(self, state: ViewState) -> None:
        with pytest.raises(OutOfRangeError, match="line out of range: requested 1001, file has 1000 lines"):
            state.goto(1001)
        assert state.cursor == 1

    def test_goto_last_line(self, state: ViewState) -> None:
        state.goto(1000)
        assert state.top == 1000
        assert state.bottom == 1000

    def test_set_cursor_keeps_viewport(self, state: ViewState) -> None:
        state.set_cursor(40)
        assert (state.top, state.cursor) == (1, 40)
        with pytest.raises(OutOfRangeError):
            state.set_cursor(2000)

    def test_scroll_to_clamps(self, state: ViewState) -> None:
        assert state.scroll_to(0) == 1
        assert state.scroll_to(5000) == 1000
        assert state.scroll_to(321) == 321
        assert state.cursor == 1

    def test_follow(self, state: ViewState) -> None:
        state.follow(30)
        assert state.top == 1
        state.follow(700)
        assert state.top == 700
        assert state.is_visible(749)
        assert not state.is_visible(750)


class TestMarks:
    def test_mark_and_unmark(self, state: ViewState) -> None:
        state.mark(100, "red")
        state.mark(100, "yellow", (5, 20))
        state.unmark(100, (5, 20))
        state.unmark(100)
        with pytest.raises(NotMarkedError):
            state.unmark(100)

    def test_mark_out_of_range(self, state: ViewState) -> None:
        with pytest.raises(OutOfRangeError):
            state.mark(1001, "red")
        with pytest.raises(InvalidArgumentError):
            state.unmark(0)

    def test_bad_region(self, state: ViewState) -> None:
        with pytest.raises(InvalidArgumentError, match="start column must be less than end column"):
            state.mark(1, "red", (9, 2))


class TestEmptyFile:
    def test_any_line_is_out_of_range(self) -> None:
        state = ViewState(line_count=0, file_size=0)
        with pytest.raises(OutOfRangeError, match="file has 0 lines"):
            state.goto(1)
        assert state.scroll_to(10) == 1
