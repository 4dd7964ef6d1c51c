"""Local files: memory-mapped with a byte-offset line index."""

from __future__ import annotations

import logging
import mmap
from array import array
from pathlib import Path
from typing_extensions import override

from logpeek.sources.base import FileSource

logger = logging.getLogger(__name__)

_NEWLINE = b"\n"
_CR = 13


class MappedSource(FileSource):
    """A local file mapped into memory.

    Opening scans the mapping once and records the offset of every line start
    plus an end sentinel, so ``offsets[n - 1]:offsets[n]`` is line ``n``
    including its terminator. Lookups afterwards are O(1).
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._mmap: mmap.mmap | None = None
        self._size = 0
        with self._path.open("rb") as f:
            self._size = self._path.stat().st_size
            if self._size > 0:
                self._mmap = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        self._offsets = self._build_index()
        logger.info("Indexed %s: %d lines, %d bytes", self._path, self.line_count, self.file_size)

    def _build_index(self) -> array[int]:
        offsets = array("Q", [0])
        data = self._mmap
        if data is None:
            return offsets
        size = len(data)
        pos = data.find(_NEWLINE)
        while pos != -1:
            offsets.append(pos + 1)
            pos = data.find(_NEWLINE, pos + 1)
        if offsets[-1] != size:
            # last line has no terminator
            offsets.append(size)
        return offsets

    @property
    @override
    def line_count(self) -> int:
        return len(self._offsets) - 1

    @property
    @override
    def file_size(self) -> int:
        return self._size

    @property
    @override
    def display_name(self) -> str:
        return str(self._path)

    def _line_bytes(self, n: int) -> bytes:
        data = self._mmap
        if data is None:
            msg = f"{self._path} is closed"
            raise ValueError(msg)
        start = self._offsets[n - 1]
        end = self._offsets[n]
        if end > start and data[end - 1] == _NEWLINE[0]:
            end -= 1
            if end > start and data[end - 1] == _CR:
                end -= 1
        return data[start:end]

    @override
    def _read_lines(self, start: int, count: int) -> list[str]:
        return [self._line_bytes(n).decode("utf-8", errors="replace") for n in range(start, start + count)]

    @override
    def close(self) -> None:
        if self._mmap is not None:
            self._mmap.close()
            self._mmap = None
