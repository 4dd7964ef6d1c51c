"""Textual application for logpeek."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.widgets import Footer

from logpeek.commands import Command, Goto, Response, Search, SearchClear, SearchNext, SearchPrev
from logpeek.config import save_config
from logpeek.controller import ViewController
from logpeek.server import CommandServer
from logpeek.widgets.help_screen import HelpScreen
from logpeek.widgets.line_view import LineView
from logpeek.widgets.prompt_dialog import PromptDialog
from logpeek.widgets.status_bar import StatusBar
from logpeek.worker import FileWorker

if TYPE_CHECKING:
    from logpeek.models import AppConfig
    from logpeek.sources import FileSource

logger = logging.getLogger(__name__)

_DARK_THEME = "textual-dark"
_LIGHT_THEME = "textual-light"


class LogPeekApp(App[None]):
    """Large file viewer TUI application.

    Owns the file worker, the view controller and (optionally) the command
    server for as long as the screen is up.
    """

    ENABLE_COMMAND_PALETTE = False

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("colon", "goto_line", "Go to"),
        Binding("slash", "search", "Search"),
        Binding("n", "search_next", "Next", show=False),
        Binding("N", "search_prev", "Prev", show=False),
        Binding("escape", "search_clear", "Clear search", show=False),
        Binding("t", "toggle_theme", "Theme", show=False),
        Binding("h", "show_help", "Help"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        source: FileSource,
        config: AppConfig,
        *,
        port: int | None = None,
        server_enabled: bool | None = None,
    ) -> None:
        super().__init__()
        self._source = source
        self._config = config
        self._port = config.port if port is None else port
        self._server_enabled = config.server_enabled if server_enabled is None else server_enabled
        self._worker = FileWorker(source)
        self._controller = ViewController(
            self._worker, page_size=config.page_size, search_buffer=config.search_buffer
        )
        self._server: CommandServer | None = None
        self._last_pattern = ""
        self.theme = config.theme

    @property
    def controller(self) -> ViewController:
        return self._controller

    @property
    def server(self) -> CommandServer | None:
        return self._server

    def compose(self) -> ComposeResult:
        yield LineView(self._worker, self._controller, id="line-view")
        yield StatusBar(source=self._source.display_name, id="status-bar")
        yield Footer()

    def on_load(self) -> None:
        # the line view requests its first page as soon as it mounts
        self._worker.start()
        self._controller.start()
        self._controller.add_listener(self._on_command_applied)

    async def on_mount(self) -> None:
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.set_file_info(self._source.line_count, self._source.file_size)
        self._update_status_bar()

        if self._server_enabled:
            server = CommandServer(self._controller, self._port)
            try:
                port = await server.start()
            except OSError as e:
                logger.warning("Command server unavailable: %s", e)
                self.notify(f"Command server unavailable: {e}", severity="warning")
            else:
                self._server = server
                status_bar.set_port(port)

        self.query_one("#line-view", LineView).focus()

    async def on_unmount(self) -> None:
        if self._server is not None:
            await self._server.stop()
        await self._controller.stop()
        await self._worker.stop()
        self._source.close()

    def _on_command_applied(self, _command: Command, _response: Response) -> None:
        if not self.is_running:
            return
        self.query_one("#line-view", LineView).sync_from_state()
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        state = self._controller.state
        search = self._controller.search
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.set_position(state.cursor, state.top)
        status_bar.set_mark_count(len(state.marks))
        if search.is_active and search.pattern is not None:
            current = search.current_index + 1 if search.current is not None else None
            status_bar.set_search_info(search.pattern, current, len(search.matches))
        else:
            status_bar.clear_search_info()

    async def _submit(self, command: Command) -> Response:
        response = await self._controller.submit(command)
        if not response.ok:
            self.notify(response.message or "command failed", severity="error")
        return response

    # --- Goto ---

    def action_goto_line(self) -> None:
        self.push_screen(
            PromptDialog("Go to line", placeholder="Line number", numeric=True), callback=self._on_goto_result
        )

    def _on_goto_result(self, result: str | None) -> None:
        if result is None:
            return
        try:
            line = int(result)
        except ValueError:
            self.notify(f"invalid line number: {result}", severity="error")
            return
        self.run_worker(self._submit(Goto(line)), group="commands")

    # --- Search ---

    def action_search(self) -> None:
        self.push_screen(
            PromptDialog("Search", value=self._last_pattern, placeholder="Regular expression"),
            callback=self._on_search_result,
        )

    def _on_search_result(self, result: str | None) -> None:
        if result is None:
            return
        self._last_pattern = result
        self.run_worker(self._run_search(result), group="commands")

    async def _run_search(self, pattern: str) -> None:
        response = await self._submit(Search(pattern))
        if response.ok:
            count = int(response.message or 0)
            self.notify(f"{count} matches near the viewport" if count else "No matches")

    def action_search_next(self) -> None:
        self.run_worker(self._submit(SearchNext()), group="commands")

    def action_search_prev(self) -> None:
        self.run_worker(self._submit(SearchPrev()), group="commands")

    def action_search_clear(self) -> None:
        if self._controller.search.is_active:
            self.run_worker(self._submit(SearchClear()), group="commands")

    # --- Theme ---

    def action_toggle_theme(self) -> None:
        self.theme = _LIGHT_THEME if self.theme == _DARK_THEME else _DARK_THEME
        self._config.theme = self.theme
        save_config(self._config)

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())
