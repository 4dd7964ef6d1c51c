"""Scrollable line display backed by the file worker."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from rich.segment import Segment
from rich.style import Style
from textual.binding import Binding, BindingType
from textual.geometry import Size
from textual.scroll_view import ScrollView
from textual.strip import Strip

from logpeek.colors import mark_style, search_current_style, search_match_style
from logpeek.commands import Command, Cursor, Goto, Response, ScrollTo
from logpeek.errors import LogPeekError
from logpeek.marks import color_spans

if TYPE_CHECKING:
    from logpeek.controller import ViewController
    from logpeek.worker import FileWorker

_PLACEHOLDER = "…"


class LineView(ScrollView, can_focus=True):
    """Virtual line viewer using the Line API.

    Only the lines around the viewport are held in memory. Pages are fetched
    through the :class:`FileWorker`; a page that arrives after a newer request
    was issued is dropped. Viewport changes are reported back to the
    controller so search results follow the user.
    """

    DEFAULT_CSS = """
    LineView {
        background: $surface;
        height: 1fr;
    }

    LineView > .lineview--cursor {
        background: $primary-darken-2;
        color: $text;
    }

    LineView > .lineview--text {
        color: $text;
    }

    LineView > .lineview--line-number {
        color: $text-disabled;
    }

    LineView > .lineview--placeholder {
        color: $text-muted;
        text-style: italic;
    }
    """

    COMPONENT_CLASSES: ClassVar[set[str]] = {
        "lineview--cursor",
        "lineview--text",
        "lineview--line-number",
        "lineview--placeholder",
    }

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("up", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
        Binding("home", "goto_first", "Home", show=False),
        Binding("end", "goto_last", "End", show=False),
    ]

    def __init__(self, worker: FileWorker, controller: ViewController, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(**kwargs)
        self._worker = worker
        self._controller = controller
        self._lines: dict[int, str] = {}
        self._latest_request = 0
        self._max_width = 0
        self._number_width = len(str(max(1, worker.line_count)))
        # viewport top the scroll view is expected to land on after a controller-driven move
        self._expected_top: int | None = None
        # cursor as last requested by this widget, ahead of the controller while a move is in flight
        self._cursor = controller.state.cursor

    @property
    def line_count(self) -> int:
        return self._controller.state.line_count

    @property
    def top(self) -> int:
        """1-based first visible line."""
        return int(self.scroll_y) + 1

    @property
    def page_height(self) -> int:
        return max(1, self.scrollable_content_region.height)

    def on_mount(self) -> None:
        self._update_virtual_size()
        self._request_page()

    def on_resize(self) -> None:
        self._request_page()

    def _update_virtual_size(self) -> None:
        self.virtual_size = Size(self._number_width + 1 + self._max_width, self.line_count)

    # --- Controller sync ---

    def sync_from_state(self) -> None:
        """Follow the viewport top held by the controller."""
        self._cursor = self._controller.state.cursor
        wanted = self._controller.state.top
        if wanted != self.top:
            landing = min(wanted - 1, int(self.max_scroll_y)) + 1
            if landing != self.top:
                self._expected_top = landing
                self.scroll_to(y=wanted - 1, animate=False)
        self._request_page()
        self.refresh()

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        if round(old_value) == round(new_value):
            return
        self._request_page()
        top = int(new_value) + 1
        if top == self._expected_top:
            self._expected_top = None
            return
        if top != self._controller.state.top:
            self._submit(ScrollTo(top))

    def _submit(self, command: Command) -> None:
        self.run_worker(self._send(command), group="commands")

    async def _send(self, command: Command) -> Response:
        response = await self._controller.submit(command)
        if not response.ok:
            self.app.notify(response.message or "command failed", severity="error")
        return response

    # --- Page loading ---

    def _request_page(self) -> None:
        if self.line_count == 0:
            return
        height = self.page_height
        first = max(1, self.top - height)
        last = min(self.line_count, self.top + 2 * height)
        if all(n in self._lines for n in range(self.top, min(self.line_count, self.top + height - 1) + 1)):
            return
        request_id = self._worker.next_request_id()
        self._latest_request = request_id
        self.run_worker(self._load_page(first, last - first + 1, request_id), group="lines")

    async def _load_page(self, start: int, count: int, request_id: int) -> None:
        try:
            page = await self._worker.get_lines(start, count, request_id=request_id)
        except LogPeekError as e:
            self.app.notify(str(e), title="Read failed", severity="error")
            return
        if page.request_id != self._latest_request:
            return
        self._lines = dict(enumerate(page.lines, start=page.start))
        widest = max((len(text) for text in page.lines), default=0)
        if widest > self._max_width:
            self._max_width = widest
            self._update_virtual_size()
        self.refresh()

    # --- Rendering ---

    def render_line(self, y: int) -> Strip:
        scroll_x, scroll_y = self.scroll_offset
        line_no = scroll_y + y + 1
        content_width = self.scrollable_content_region.width

        if content_width <= 0:
            return Strip.blank(self.size.width, self.rich_style)
        if line_no > self.line_count:
            return Strip.blank(content_width, self.rich_style)

        state = self._controller.state
        is_cursor = line_no == state.cursor
        bg_style = self.get_component_rich_style("lineview--cursor") if is_cursor else Style()
        lineno_style = self.get_component_rich_style("lineview--line-number")

        segments = [Segment(f"{line_no:>{self._number_width}} ", lineno_style + bg_style)]
        text = self._lines.get(line_no)
        if text is None:
            segments.append(Segment(_PLACEHOLDER, self.get_component_rich_style("lineview--placeholder") + bg_style))
        else:
            segments.extend(self._render_text(line_no, text, bg_style))

        strip = Strip(segments).crop(scroll_x, scroll_x + content_width)
        if bg_style != Style():
            strip = strip.extend_cell_length(content_width, Style(bgcolor=bg_style.bgcolor))
        else:
            strip = strip.extend_cell_length(content_width)
            strip = strip.apply_style(self.rich_style)
        return strip

    def _render_text(self, line_no: int, text: str, bg_style: Style) -> list[Segment]:
        """Split a line into segments: marks first, search hits painted over them."""
        # tabs would shift every column after them
        text = text.replace("\t", " ")
        text_style = self.get_component_rich_style("lineview--text") + bg_style
        styles: list[Style] = [text_style] * len(text)

        marks = self._controller.state.marks.get(line_no)
        for start, end, color in color_spans(marks, len(text)):
            if color is not None:
                styles[start:end] = [text_style + mark_style(color)] * (end - start)

        search = self._controller.search
        current = search.current
        for match in search.matches_on_line(line_no):
            start = match.column - 1
            end = min(len(text), start + match.length)
            style = search_current_style() if match == current else search_match_style()
            styles[start:end] = [style] * (end - start)

        segments: list[Segment] = []
        pos = 0
        while pos < len(text):
            run_end = pos + 1
            while run_end < len(text) and styles[run_end] == styles[pos]:
                run_end += 1
            segments.append(Segment(text[pos:run_end], styles[pos]))
            pos = run_end
        return segments

    # --- Actions ---

    def _move_cursor(self, line: int) -> None:
        if self.line_count == 0:
            return
        line = max(1, min(line, self.line_count))
        self._cursor = line
        self._submit(Cursor(line))
        if line < self.top:
            self.scroll_to(y=line - 1, animate=False)
        elif line >= self.top + self.page_height:
            self.scroll_to(y=line - self.page_height, animate=False)
        self.refresh()

    def action_cursor_up(self) -> None:
        self._move_cursor(self._cursor - 1)

    def action_cursor_down(self) -> None:
        self._move_cursor(self._cursor + 1)

    def action_page_up(self) -> None:
        self._move_cursor(self._cursor - self.page_height)

    def action_page_down(self) -> None:
        self._move_cursor(self._cursor + self.page_height)

    def action_goto_first(self) -> None:
        if self.line_count:
            self._submit(Goto(1))

    def action_goto_last(self) -> None:
        if self.line_count:
            self._submit(Goto(self.line_count))
