"""Line-addressable file source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

from logpeek.errors import OutOfRangeError

if TYPE_CHECKING:
    from types import TracebackType


class FileSource(ABC):
    """Random access to the lines of an immutable text file.

    Line numbers are 1-based. ``line_count`` and ``file_size`` are fixed once
    the source is opened.
    """

    @property
    @abstractmethod
    def line_count(self) -> int: ...

    @property
    @abstractmethod
    def file_size(self) -> int: ...

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @abstractmethod
    def _read_lines(self, start: int, count: int) -> list[str]:
        """Read ``count`` lines from ``start``; the range is already validated and clipped."""

    def get_lines(self, start: int, count: int) -> list[str]:
        """Return up to ``count`` lines starting at ``start``, clipped to the end of the file."""
        if start < 1:
            raise OutOfRangeError.for_line(start, self.line_count)
        count = min(count, self.line_count - start + 1)
        if count <= 0:
            return []
        return self._read_lines(start, count)

    def get_line(self, n: int) -> str:
        """Return line ``n``, raising OutOfRangeError outside ``[1, line_count]``."""
        self.check_line(n)
        return self._read_lines(n, 1)[0]

    def check_line(self, n: int) -> None:
        if not 1 <= n <= self.line_count:
            raise OutOfRangeError.for_line(n, self.line_count)

    def close(self) -> None:  # noqa: B027 - optional hook
        """Release resources held by the source."""

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
