"""Single owner of the view state; applies commands one at a time."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from logpeek.commands import (
    Command,
    Cursor,
    Goto,
    Lines,
    Mark,
    Response,
    ScrollTo,
    Search,
    SearchClear,
    SearchNext,
    SearchPrev,
    Size,
    Top,
    Unmark,
)
from logpeek.errors import LogPeekError, RemoteError
from logpeek.search import SearchEngine, compile_pattern, search_window
from logpeek.view import ViewState

if TYPE_CHECKING:
    from collections.abc import Callable

    from logpeek.models import SearchMatch
    from logpeek.worker import FileWorker

logger = logging.getLogger(__name__)


class ViewController:
    """Actor owning :class:`ViewState` and :class:`SearchEngine`.

    ``submit`` enqueues a command and waits for its reply. A single task drains
    the queue, so state-changing commands are applied atomically and in the
    order they were delivered, whether they come from the TCP server or the UI.
    """

    def __init__(self, worker: FileWorker, *, page_size: int = 50, search_buffer: int = 100) -> None:
        self._worker = worker
        self.state = ViewState(worker.line_count, worker.file_size, page_size=page_size)
        self.search = SearchEngine()
        self.search_buffer = search_buffer
        self._queue: asyncio.Queue[tuple[Command, asyncio.Future[Response]] | None] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[Callable[[Command, Response], None]] = []

    def add_listener(self, listener: Callable[[Command, Response], None]) -> None:
        """Call ``listener(command, response)`` after every applied command."""
        self._listeners.append(listener)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="view-controller")

    async def stop(self) -> None:
        if self._task is None:
            return
        await self._queue.put(None)
        await self._task
        self._task = None

    async def __aenter__(self) -> ViewController:
        self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.stop()

    async def submit(self, command: Command) -> Response:
        if self._task is None:
            return Response.error("viewer not available")
        future: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        await self._queue.put((command, future))
        return await future

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            if item is None:
                break
            command, future = item
            response = await self._apply(command)
            if not future.cancelled():
                future.set_result(response)
            for listener in self._listeners:
                try:
                    listener(command, response)
                except Exception:
                    logger.exception("view listener failed")

    async def _apply(self, command: Command) -> Response:
        logger.debug("apply %s", command)
        try:
            return await self._execute(command)
        except LogPeekError as e:
            return Response.error(str(e))
        except Exception as e:
            logger.exception("command %s failed", command)
            return Response.error(f"internal error: {e}")

    async def _execute(self, command: Command) -> Response:  # noqa: C901, PLR0911
        state = self.state
        match command:
            case Goto(line=line):
                state.goto(line)
                await self._refresh_search()
                return Response.success()
            case Lines():
                return Response.success(state.line_count)
            case Top():
                return Response.success(state.top)
            case Size():
                return Response.success(state.file_size)
            case Cursor(line=None):
                return Response.success(state.cursor)
            case Cursor(line=line):
                state.set_cursor(line)
                return Response.success()
            case Mark(line=line, color=color, region=region):
                state.mark(line, color, region)
                return Response.success()
            case Unmark(line=line, region=region):
                state.unmark(line, region)
                return Response.success()
            case Search(pattern=pattern):
                return Response.success(await self._search(pattern))
            case SearchNext():
                return await self._navigated(self.search.next())
            case SearchPrev():
                return await self._navigated(self.search.prev())
            case SearchClear():
                self.search.clear()
                return Response.success()
            case ScrollTo(top=top):
                state.scroll_to(top)
                await self._refresh_search()
                return Response.success(state.top)
        return Response.error(f"unsupported command: {command!r}")

    def _window(self) -> tuple[int, int]:
        return search_window(self.state.top, self.state.page_size, self.search_buffer, self.state.line_count)

    async def _search(self, pattern: str) -> int:
        compiled = compile_pattern(pattern)
        window = self._window()
        lines = await self._worker.get_numbered_lines(*window)
        count = self.search.search(compiled, lines, window)
        if count:
            first = self.search.matches[0]
            self.state.follow(first.line)
        return count

    async def _navigated(self, match: SearchMatch) -> Response:
        self.state.set_cursor(match.line)
        self.state.follow(match.line)
        await self._refresh_search()
        return Response.success(f"{match.line} {match.column} {match.length}")

    async def _refresh_search(self) -> None:
        """Rescan when the viewport has left the searched window."""
        state = self.state
        if not self.search.needs_rescan(state.top, state.page_size, self.search_buffer, state.line_count):
            return
        window = self._window()
        try:
            lines = await self._worker.get_numbered_lines(*window)
        except RemoteError as e:
            logger.warning("Keeping stale search window %s: %s", self.search.window, e)
            return
        self.search.rescan(lines, window, state.cursor)
