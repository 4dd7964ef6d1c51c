"""Tests for the loopback command server."""

from __future__ import annotations

import asyncio
import contextlib
import errno
import socket
from typing import TYPE_CHECKING

import pytest

from logpeek.controller import ViewController
from logpeek.server import HOST, CommandServer
from logpeek.sources import MappedSource
from logpeek.worker import FileWorker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@contextlib.asynccontextmanager
async def _serving(path: Path, port: int = 0) -> AsyncIterator[CommandServer]:
    with MappedSource(path) as source:
        async with (
            FileWorker(source) as worker,
            ViewController(worker) as controller,
            CommandServer(controller, port) as server,
        ):
            yield server


async def _exchange(port: int, *requests: str) -> list[str]:
    reader, writer = await asyncio.open_connection(HOST, port)
    replies: list[str] = []
    try:
        for request in requests:
            writer.write(f"{request}\n".encode())
            await writer.drain()
            if request.strip():
                replies.append((await reader.readline()).decode().rstrip("\n"))
    finally:
        writer.close()
        await writer.wait_closed()
    return replies


class TestCommandServer:
    @pytest.mark.asyncio
    async def test_round_trip(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            assert server.port is not None
            replies = await _exchange(server.port, "lines", "goto 500", "cursor", "bogus", "search line 7$")
        assert replies == ["OK 1000", "OK", "OK 500", "ERROR unknown command: bogus", "OK 1"]

    @pytest.mark.asyncio
    async def test_blank_lines_are_ignored(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            assert server.port is not None
            replies = await _exchange(server.port, "", "   ", "top")
        assert replies == ["OK 1"]

    @pytest.mark.asyncio
    async def test_state_shared_between_clients(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            assert server.port is not None
            await _exchange(server.port, "cursor 77")
            assert await _exchange(server.port, "cursor") == ["OK 77"]

    @pytest.mark.asyncio
    async def test_concurrent_clients(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            assert server.port is not None
            port = server.port
            results = await asyncio.gather(*(_exchange(port, f"mark {n} red", "lines") for n in range(1, 11)))
        assert results == [["OK", "OK 1000"]] * 10

    @pytest.mark.asyncio
    async def test_handle_line_parse_error(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            assert str(await server.handle_line("goto x")) == "ERROR invalid line number: x"

    @pytest.mark.asyncio
    async def test_skips_busy_port(self, numbered_file: Path) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind((HOST, 0))
            blocker.listen()
            busy = blocker.getsockname()[1]
            if busy >= 65535:
                pytest.skip("no room above the ephemeral port")
            async with _serving(numbered_file, port=busy) as server:
                assert server.port is not None
                assert server.port > busy

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, numbered_file: Path) -> None:
        async with _serving(numbered_file) as server:
            await server.stop()
            await server.stop()

    @pytest.mark.asyncio
    async def test_no_free_port(self, numbered_file: Path) -> None:
        in_use = OSError(errno.EADDRINUSE, "address in use")
        with MappedSource(numbered_file) as source:
            async with FileWorker(source) as worker, ViewController(worker) as controller:
                server = CommandServer(controller, 9876)
                with (
                    pytest.MonkeyPatch.context() as mp,
                    pytest.raises(OSError, match="no free port in 9876-9975"),
                ):
                    mp.setattr(asyncio, "start_server", _raiser(in_use))
                    await server.start()


def _raiser(exc: Exception):
    async def start_server(*_args: object, **_kwargs: object) -> asyncio.Server:
        raise exc

    return start_server
