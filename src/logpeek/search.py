"""Viewport-scoped regex search with cursor navigation."""

from __future__ import annotations

import bisect
import re
from typing import TYPE_CHECKING

from logpeek.errors import InvalidPatternError, NoActiveSearchError, NoMoreMatchesError
from logpeek.models import SearchMatch

if TYPE_CHECKING:
    from collections.abc import Iterable


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a search pattern, raising InvalidPatternError on failure."""
    try:
        return re.compile(pattern)
    except re.error as e:
        msg = f"invalid regex: {e}"
        raise InvalidPatternError(msg) from e


def find_matches(lines: Iterable[tuple[int, str]], pattern: re.Pattern[str]) -> list[SearchMatch]:
    """Find all non-empty matches in ``(line_number, text)`` pairs, ordered by (line, column)."""
    results: list[SearchMatch] = []
    for line_number, text in lines:
        results.extend(
            SearchMatch(line=line_number, column=m.start() + 1, length=m.end() - m.start())
            for m in pattern.finditer(text)
            if m.end() > m.start()
        )
    results.sort(key=lambda m: m.key)
    return results


def search_window(top: int, page_size: int, buffer: int, line_count: int) -> tuple[int, int]:
    """Inclusive line range searched around a viewport starting at ``top``."""
    first = max(1, top - buffer)
    last = min(line_count, top + page_size - 1 + buffer)
    return first, last


class SearchEngine:
    """Active pattern plus the ordered matches found inside the searched window.

    ``current_index`` is -1 right after a search: the engine is armed before
    the first match, so the first ``next()`` reports it. Navigation never
    wraps around.
    """

    def __init__(self) -> None:
        self._pattern: re.Pattern[str] | None = None
        self._matches: list[SearchMatch] = []
        self._current_index: int = -1
        self._window: tuple[int, int] | None = None

    @property
    def is_active(self) -> bool:
        return self._pattern is not None

    @property
    def pattern(self) -> str | None:
        return self._pattern.pattern if self._pattern is not None else None

    @property
    def matches(self) -> list[SearchMatch]:
        return self._matches

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current(self) -> SearchMatch | None:
        if 0 <= self._current_index < len(self._matches):
            return self._matches[self._current_index]
        return None

    @property
    def window(self) -> tuple[int, int] | None:
        return self._window

    def matches_on_line(self, line: int) -> list[SearchMatch]:
        lo = bisect.bisect_left(self._matches, (line, 0), key=lambda m: m.key)
        hi = bisect.bisect_left(self._matches, (line + 1, 0), key=lambda m: m.key)
        return self._matches[lo:hi]

    def search(self, pattern: str | re.Pattern[str], lines: Iterable[tuple[int, str]], window: tuple[int, int]) -> int:
        """Replace any prior search and scan ``lines``. Returns the match count."""
        compiled = compile_pattern(pattern) if isinstance(pattern, str) else pattern
        self._pattern = compiled
        self._matches = find_matches(lines, compiled)
        self._current_index = -1
        self._window = window
        return len(self._matches)

    def clear(self) -> None:
        self._pattern = None
        self._matches = []
        self._current_index = -1
        self._window = None

    def next(self) -> SearchMatch:
        return self._step(1)

    def prev(self) -> SearchMatch:
        return self._step(-1)

    def _step(self, delta: int) -> SearchMatch:
        if self._pattern is None:
            raise NoActiveSearchError
        index = self._current_index + delta
        if not 0 <= index < len(self._matches):
            raise NoMoreMatchesError
        self._current_index = index
        return self._matches[index]

    def needs_rescan(self, top: int, page_size: int, buffer: int, line_count: int) -> bool:
        """Whether the viewport at ``top`` has drifted too close to the edge of the searched window."""
        if self._pattern is None or self._window is None:
            return False
        first, last = self._window
        half = buffer // 2
        bottom = min(line_count, top + page_size - 1)
        near_start = first > 1 and top < first + half
        near_end = last < line_count and bottom > last - half
        return near_start or near_end

    def rescan(self, lines: Iterable[tuple[int, str]], window: tuple[int, int], cursor: int) -> int:
        """Recompute matches for a new window, keeping the navigation position.

        The current match stays current if it is still in the window; otherwise
        the engine is armed just before the first match at or after ``cursor``.
        """
        if self._pattern is None:
            raise NoActiveSearchError
        current = self.current
        self._matches = find_matches(lines, self._pattern)
        self._window = window
        keys = [m.key for m in self._matches]
        if current is not None:
            i = bisect.bisect_left(keys, current.key)
            if i < len(keys) and keys[i] == current.key:
                self._current_index = i
                return len(self._matches)
        self._current_index = bisect.bisect_left(keys, (cursor, 0)) - 1
        return len(self._matches)
