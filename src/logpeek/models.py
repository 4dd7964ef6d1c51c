"""Pydantic models for logpeek."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class LocatorKind(StrEnum):
    """Where a file lives."""

    LOCAL = "local"
    REMOTE = "remote"


class FileLocator(BaseModel):
    """A parsed ``path`` or ``[user@]host:path`` file locator."""

    kind: LocatorKind
    path: str
    host: str | None = None

    @property
    def display_name(self) -> str:
        if self.kind == LocatorKind.REMOTE:
            return f"{self.host}:{self.path}"
        return self.path


class RegionMark(BaseModel):
    """A highlighted column span. Columns are 1-based, ``end_col`` exclusive."""

    start_col: int
    end_col: int
    color: str

    def overlaps(self, start_col: int, end_col: int) -> bool:
        return self.start_col < end_col and start_col < self.end_col


class LineMarks(BaseModel):
    """All marks on a single line: at most one full-line colour plus regions."""

    full_line: str | None = None
    regions: list[RegionMark] = []

    @property
    def is_empty(self) -> bool:
        return self.full_line is None and not self.regions


class SearchMatch(BaseModel):
    """A regex match. ``line`` and ``column`` are 1-based, column counts characters."""

    line: int
    column: int
    length: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.line, self.column)


class AppConfig(BaseModel):
    """Application configuration persisted to disk."""

    theme: str = "textual-dark"
    port: int = Field(default=9876, ge=0, le=65535)
    server_enabled: bool = True
    page_size: int = Field(default=50, ge=1)
    search_buffer: int = Field(default=100, ge=0)
    chunk_size: int = Field(default=500, ge=1)
    cache_chunks: int = Field(default=20, ge=1)
    remote_attempts: int = Field(default=3, ge=1)
    remote_timeout: float = Field(default=10.0, gt=0)
    remote_backoff: float = Field(default=0.5, ge=0)
    ssh_command: str = "ssh"
