"""Loopback TCP listener for the text control protocol."""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
from typing import TYPE_CHECKING

from logpeek.commands import Response, parse_command
from logpeek.errors import LogPeekError

if TYPE_CHECKING:
    from logpeek.controller import ViewController

logger = logging.getLogger(__name__)

HOST = "127.0.0.1"
MAX_PORT_ATTEMPTS = 100


class CommandServer:
    """Accepts connections on 127.0.0.1 and forwards each command line to the controller.

    Every connection is served by its own task, but commands are applied by the
    controller one at a time. Each request line gets exactly one reply line.
    """

    def __init__(self, controller: ViewController, port: int) -> None:
        self._controller = controller
        self._requested_port = port
        self._server: asyncio.Server | None = None
        self.port: int | None = None

    async def start(self) -> int:
        """Bind the first free port at or above the requested one. Returns the bound port."""
        last_error: OSError | None = None
        attempts = 1 if self._requested_port == 0 else MAX_PORT_ATTEMPTS
        for offset in range(attempts):
            port = self._requested_port + offset
            if port > 65535:  # noqa: PLR2004
                break
            try:
                self._server = await asyncio.start_server(self._handle_client, HOST, port)
            except OSError as e:
                if e.errno != errno.EADDRINUSE:
                    raise
                last_error = e
                continue
            self.port = self._server.sockets[0].getsockname()[1]
            logger.info("Command server listening on %s:%d", HOST, self.port)
            return self.port
        msg = f"no free port in {self._requested_port}-{self._requested_port + attempts - 1}"
        raise OSError(errno.EADDRINUSE, msg) from last_error

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Command server stopped")

    async def __aenter__(self) -> CommandServer:
        await self.start()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.stop()

    async def handle_line(self, line: str) -> Response:
        """Parse one request line and run it through the controller."""
        try:
            command = parse_command(line)
        except LogPeekError as e:
            return Response.error(str(e))
        return await self._controller.submit(command)

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        logger.info("Client connected: %s", peer)
        try:
            while raw := await reader.readline():
                line = raw.decode("utf-8", errors="replace").strip()
                if not line:
                    continue
                logger.debug("%s -> %s", peer, line)
                response = await self.handle_line(line)
                writer.write(f"{response}\n".encode())
                await writer.drain()
        except (ConnectionError, ValueError) as e:
            logger.info("Client %s dropped: %s", peer, e)
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()
            logger.info("Client disconnected: %s", peer)
