"""Shared test fixtures."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import pytest

from logpeek.errors import RemoteCommandFailedError, RemoteUnreachableError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

_TAIL_HEAD = re.compile(r"^tail -n \+(\d+) (\S+) \| head -n (\d+)$")


class FakeTransport:
    """In-memory stand-in for ssh that understands the commands RemoteSource issues."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.commands: list[str] = []
        self.fail_fetches = 0
        self.fail_stats = 0
        self.short_reads = 0

    @property
    def size(self) -> int:
        return sum(len(line.encode()) + 1 for line in self.lines)

    def run(self, host: str, command: str, timeout: float) -> bytes:  # noqa: ARG002
        self.commands.append(command)
        if command.startswith("awk"):
            if self.fail_stats:
                self.fail_stats -= 1
                raise RemoteUnreachableError(host, "connection refused")
            return f"{len(self.lines)}\n{self.size}\n".encode()

        match = _TAIL_HEAD.match(command)
        if match is None:
            raise RemoteCommandFailedError(host, f"unexpected command {command!r}")
        if self.fail_fetches:
            self.fail_fetches -= 1
            raise RemoteUnreachableError(host, "connection reset")
        start, count = int(match.group(1)), int(match.group(3))
        selected = self.lines[start - 1 : start - 1 + count]
        if self.short_reads:
            self.short_reads -= 1
            selected = selected[:-1]
        return "".join(f"{line}\n" for line in selected).encode()

    @property
    def fetches(self) -> list[str]:
        return [c for c in self.commands if c.startswith("tail")]


@pytest.fixture
def numbered_file(tmp_path: Path) -> Path:
    """A 1000 line file where line N reads ``line N``."""
    path = tmp_path / "numbered.log"
    path.write_text("".join(f"line {n}\n" for n in range(1, 1001)))
    return path


@pytest.fixture
def make_transport() -> Callable[[list[str]], FakeTransport]:
    return FakeTransport


@pytest.fixture
def numbered_transport() -> FakeTransport:
    return FakeTransport([f"line {n}" for n in range(1, 1001)])
