"""Full-line and region marks."""

from __future__ import annotations

from logpeek.errors import InvalidArgumentError, NotMarkedError
from logpeek.models import LineMarks, RegionMark


def validate_region(start_col: int, end_col: int) -> None:
    """Check 1-based, end-exclusive column bounds."""
    if start_col < 1 or end_col < 1:
        msg = "column numbers must be >= 1"
        raise InvalidArgumentError(msg)
    if start_col >= end_col:
        msg = "start column must be less than end column"
        raise InvalidArgumentError(msg)


class MarkStore:
    """Mapping from line number to the marks on that line.

    A line holds at most one full-line colour (a new one replaces it) and any
    number of non-overlapping regions (a new region drops the ones it overlaps).
    """

    def __init__(self) -> None:
        self._lines: dict[int, LineMarks] = {}

    def get(self, line: int) -> LineMarks | None:
        return self._lines.get(line)

    def lines(self) -> list[int]:
        return sorted(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, line: object) -> bool:
        return line in self._lines

    def mark_line(self, line: int, color: str) -> None:
        self._lines.setdefault(line, LineMarks()).full_line = color

    def mark_region(self, line: int, start_col: int, end_col: int, color: str) -> None:
        validate_region(start_col, end_col)
        entry = self._lines.setdefault(line, LineMarks())
        regions = [r for r in entry.regions if not r.overlaps(start_col, end_col)]
        regions.append(RegionMark(start_col=start_col, end_col=end_col, color=color))
        regions.sort(key=lambda r: r.start_col)
        entry.regions = regions

    def unmark_line(self, line: int) -> None:
        """Remove every mark on ``line``."""
        if self._lines.pop(line, None) is None:
            raise NotMarkedError(line)

    def unmark_region(self, line: int, start_col: int, end_col: int) -> None:
        """Remove the region with exactly these bounds."""
        entry = self._lines.get(line)
        if entry is None:
            raise NotMarkedError(line)
        kept = [r for r in entry.regions if (r.start_col, r.end_col) != (start_col, end_col)]
        if len(kept) == len(entry.regions):
            raise NotMarkedError(line)
        entry.regions = kept
        if entry.is_empty:
            del self._lines[line]

    def clear(self) -> None:
        self._lines.clear()


def color_spans(marks: LineMarks | None, length: int) -> list[tuple[int, int, str | None]]:
    """Split ``[0, length)`` into 0-based ``(start, end, color)`` runs.

    Regions override the full-line colour where they overlap; uncovered
    stretches carry the full-line colour or None.
    """
    if length <= 0:
        return []
    base = marks.full_line if marks is not None else None
    spans: list[tuple[int, int, str | None]] = []
    pos = 0
    for region in marks.regions if marks is not None else []:
        start = min(region.start_col - 1, length)
        end = min(region.end_col - 1, length)
        if start >= end:
            continue
        if start > pos:
            spans.append((pos, start, base))
        spans.append((start, end, region.color))
        pos = end
    if pos < length:
        spans.append((pos, length, base))
    return spans
