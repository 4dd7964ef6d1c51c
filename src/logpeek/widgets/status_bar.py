"""Bottom status bar."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

_MILLION = 1_000_000
_TEN_THOUSAND = 10_000
_THOUSAND = 1_000


def _format_count(n: int) -> str:
    """Format a line count compactly: 1234 -> '1,234', 1234567 -> '1.2M'."""
    if n >= _MILLION:
        return f"{n / _MILLION:.1f}M"
    if n >= _TEN_THOUSAND:
        return f"{n / _THOUSAND:.0f}K"
    return f"{n:,}"


def _format_size(n: int) -> str:
    size = float(n)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024 or unit == "GiB":  # noqa: PLR2004
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{n} B"


class StatusBar(Widget):
    """Bottom status bar showing position, search info, control port, and source."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $primary;
        color: $text;
        padding: 0 1;
    }
    """

    def __init__(self, source: str = "", id: str | None = None) -> None:  # noqa: A002
        super().__init__(id=id)
        self._source = source
        self._total: int = 0
        self._file_size: int = 0
        self._cursor: int = 1
        self._top: int = 1
        self._search_pattern: str | None = None
        self._search_current: int | None = None
        self._search_total: int | None = None
        self._mark_count: int = 0
        self._port: int | None = None

    def set_file_info(self, total: int, file_size: int) -> None:
        self._total = total
        self._file_size = file_size
        self.refresh()

    def set_position(self, cursor: int, top: int) -> None:
        self._cursor = cursor
        self._top = top
        self.refresh()

    def set_search_info(self, pattern: str, current: int | None, total: int) -> None:
        """Set search match info; ``current`` is 1-based or None before the first step."""
        self._search_pattern = pattern
        self._search_current = current
        self._search_total = total
        self.refresh()

    def clear_search_info(self) -> None:
        """Clear search info from status bar."""
        self._search_pattern = None
        self._search_current = None
        self._search_total = None
        self.refresh()

    def set_mark_count(self, count: int) -> None:
        self._mark_count = count
        self.refresh()

    def set_port(self, port: int | None) -> None:
        """Show the control port, or nothing when the listener is off."""
        self._port = port
        self.refresh()

    def _render_search(self, text: Text) -> None:
        if self._search_total is None:
            return
        text.append(f"  /{self._search_pattern}/", style="italic")
        if self._search_total == 0:
            text.append(" No matches", style="bold italic")
        elif self._search_current is None:
            text.append(f" [-/{self._search_total}]", style="bold")
        else:
            text.append(f" [{self._search_current}/{self._search_total}]", style="bold")

    def render(self) -> Text:
        text = Text()
        text.append(f"Ln {self._cursor:,}/{_format_count(self._total)}")
        text.append(f"  Top {self._top:,}")
        text.append(f"  {_format_size(self._file_size)}", style="dim")

        self._render_search(text)

        if self._mark_count > 0:
            text.append(f"  M:{self._mark_count}", style="bold")

        if self._port is not None:
            text.append(f"  :{self._port}", style="bold")

        right_part = self._source
        if right_part:
            used = len(text.plain)
            padding = max(1, self.size.width - used - len(right_part))
            text.append(" " * padding)
            text.append(right_part)

        return text
