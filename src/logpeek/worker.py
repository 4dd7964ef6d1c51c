"""Background worker that owns the open file source."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from logpeek.sources import FileSource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LinePage:
    """Lines returned for one request, tagged with the request id."""

    request_id: int
    start: int
    lines: list[str]


@dataclass(slots=True)
class _Request:
    request_id: int
    call: Callable[[FileSource], Any]
    future: asyncio.Future[Any] = field(repr=False)


class FileWorker:
    """Serializes every access to a :class:`FileSource`.

    Requests are queued and executed one at a time in a thread, so a slow
    remote round trip never blocks the event loop and the source (with its
    cache) is never entered concurrently. A failed request fails only its own
    future; the worker keeps serving.
    """

    def __init__(self, source: FileSource) -> None:
        self._source = source
        self._queue: asyncio.Queue[_Request | None] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._ids = itertools.count(1)

    @property
    def source(self) -> FileSource:
        return self._source

    @property
    def line_count(self) -> int:
        return self._source.line_count

    @property
    def file_size(self) -> int:
        return self._source.file_size

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="file-worker")

    async def stop(self) -> None:
        """Finish queued requests, then stop the consumer task."""
        if self._task is None:
            return
        await self._queue.put(None)
        await self._task
        self._task = None

    async def __aenter__(self) -> FileWorker:
        self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.stop()

    def next_request_id(self) -> int:
        return next(self._ids)

    async def call(self, fn: Callable[[FileSource], Any], *, request_id: int | None = None) -> Any:  # noqa: ANN401
        """Run ``fn(source)`` on the worker and return its result."""
        if self._task is None:
            msg = "FileWorker is not running"
            raise RuntimeError(msg)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        await self._queue.put(_Request(request_id or self.next_request_id(), fn, future))
        return await future

    async def get_lines(self, start: int, count: int, *, request_id: int | None = None) -> LinePage:
        rid = request_id or self.next_request_id()
        lines = await self.call(lambda source: source.get_lines(start, count), request_id=rid)
        return LinePage(request_id=rid, start=start, lines=lines)

    async def get_numbered_lines(self, first: int, last: int) -> list[tuple[int, str]]:
        """Lines ``first..last`` inclusive as ``(line_number, text)`` pairs."""
        if last < first:
            return []
        page = await self.get_lines(first, last - first + 1)
        return list(enumerate(page.lines, start=first))

    async def _run(self) -> None:
        while True:
            request = await self._queue.get()
            if request is None:
                break
            if request.future.cancelled():
                continue
            try:
                result = await asyncio.to_thread(request.call, self._source)
            except Exception as e:  # noqa: BLE001 - delivered to the requester
                logger.debug("request %d failed: %s", request.request_id, e)
                if not request.future.cancelled():
                    request.future.set_exception(e)
            else:
                if not request.future.cancelled():
                    request.future.set_result(result)
