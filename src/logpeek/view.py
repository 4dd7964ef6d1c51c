"""Cursor, viewport and marks for one open file."""

from __future__ import annotations

from logpeek.errors import InvalidArgumentError, OutOfRangeError
from logpeek.marks import MarkStore


class ViewState:
    """Navigation state mutated by control commands and read by the render loop.

    Both the cursor and the viewport top are 1-based and start at 1.
    """

    def __init__(self, line_count: int, file_size: int, page_size: int = 50) -> None:
        self.line_count = line_count
        self.file_size = file_size
        self.page_size = page_size
        self._cursor = 1
        self._top = 1
        self.marks = MarkStore()

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def top(self) -> int:
        return self._top

    @property
    def bottom(self) -> int:
        """Last line inside the viewport."""
        return min(self.line_count, self._top + self.page_size - 1)

    def check_line(self, line: int) -> None:
        if line < 1:
            msg = "line number must be >= 1"
            raise InvalidArgumentError(msg)
        if line > self.line_count:
            raise OutOfRangeError.for_line(line, self.line_count)

    def goto(self, line: int) -> None:
        """Move both the viewport top and the cursor to ``line``."""
        self.check_line(line)
        self._top = line
        self._cursor = line

    def set_cursor(self, line: int) -> None:
        """Move the cursor without scrolling."""
        self.check_line(line)
        self._cursor = line

    def scroll_to(self, top: int) -> int:
        """Set the viewport top as reported by the render loop, clamped to the file."""
        self._top = max(1, min(top, self.line_count))
        return self._top

    def follow(self, line: int) -> None:
        """Put ``line`` at the top of the viewport unless it is already visible."""
        if not self.is_visible(line):
            self._top = line

    def is_visible(self, line: int) -> bool:
        return self._top <= line <= self.bottom

    def mark(self, line: int, color: str, region: tuple[int, int] | None = None) -> None:
        self.check_line(line)
        if region is None:
            self.marks.mark_line(line, color)
        else:
            self.marks.mark_region(line, region[0], region[1], color)

    def unmark(self, line: int, region: tuple[int, int] | None = None) -> None:
        self.check_line(line)
        if region is None:
            self.marks.unmark_line(line)
        else:
            self.marks.unmark_region(line, region[0], region[1])
