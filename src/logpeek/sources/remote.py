"""Remote files reached over ssh, fetched in cached chunks."""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
import time
from typing import TYPE_CHECKING, Protocol

from typing_extensions import override

from logpeek.cache import ChunkCache, ChunkKey
from logpeek.errors import RemoteCommandFailedError, RemoteError, RemoteFetchFailedError, RemoteUnreachableError
from logpeek.sources.base import FileSource
from logpeek.utils import RetryPolicy, with_retry

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# ssh reserves exit status 255 for its own (connection) errors
_SSH_CONNECTION_FAILED = 255

# `~` or `~user`; anything else after the tilde is quoted literally
_HOME_PREFIX = re.compile(r"~[A-Za-z0-9._-]*")


class Transport(Protocol):
    """Runs a shell command on a remote host and returns its stdout."""

    def run(self, host: str, command: str, timeout: float) -> bytes: ...


class SshTransport:
    """Transport backed by the local ``ssh`` client in batch mode."""

    def __init__(self, ssh_command: str = "ssh") -> None:
        self._ssh_command = ssh_command

    def build_argv(self, host: str, command: str, timeout: float) -> list[str]:
        return [
            self._ssh_command,
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={max(1, int(timeout))}",
            host,
            command,
        ]

    def run(self, host: str, command: str, timeout: float) -> bytes:
        argv = self.build_argv(host, command, timeout)
        logger.debug("ssh %s: %s", host, command)
        try:
            result = subprocess.run(argv, capture_output=True, timeout=timeout, check=False)  # noqa: S603
        except subprocess.TimeoutExpired as e:
            raise RemoteUnreachableError(host, f"timed out after {timeout:g}s") from e
        except OSError as e:
            raise RemoteUnreachableError(host, f"cannot run {self._ssh_command}: {e}") from e

        if result.returncode == 0:
            return result.stdout
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        if result.returncode == _SSH_CONNECTION_FAILED:
            raise RemoteUnreachableError(host, stderr or "connection failed")
        raise RemoteCommandFailedError(host, stderr or f"command exited with status {result.returncode}")


def quote_remote_path(path: str) -> str:
    """Quote ``path`` for the remote shell, leaving a leading ``~`` or ``~user`` unquoted so it still expands."""
    if not path.startswith("~"):
        return shlex.quote(path)
    home, sep, rest = path.partition("/")
    if not _HOME_PREFIX.fullmatch(home):
        return shlex.quote(path)
    if not rest:
        return home + sep
    return f"{home}/{shlex.quote(rest)}"


def _split_lines(data: bytes) -> list[str]:
    """Split command output on ``\\n``; a trailing terminator does not add an empty line."""
    if not data:
        return []
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return [p.removesuffix(b"\r").decode("utf-8", errors="replace") for p in parts]


class RemoteSource(FileSource):
    """A file on a remote host, read on demand with ``tail | head``.

    Line count and size are queried once at open time. Lines are fetched in
    chunk-aligned blocks and kept in a private :class:`ChunkCache`, so repeated
    reads of the same region cost no round trip.
    """

    def __init__(
        self,
        host: str,
        path: str,
        transport: Transport | None = None,
        *,
        chunk_size: int = 500,
        cache_chunks: int = 20,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._host = host
        self._path = path
        self._quoted_path = quote_remote_path(path)
        self._transport = transport or SshTransport()
        self._chunk_size = chunk_size
        self._policy = policy or RetryPolicy()
        self._sleep = sleep or time.sleep
        self.cache = ChunkCache(cache_chunks)
        self.fetch_count = 0
        self._line_count, self._file_size = self._query_stats()
        logger.info("Opened %s: %d lines, %d bytes", self.display_name, self._line_count, self._file_size)

    @property
    @override
    def line_count(self) -> int:
        return self._line_count

    @property
    @override
    def file_size(self) -> int:
        return self._file_size

    @property
    @override
    def display_name(self) -> str:
        return f"{self._host}:{self._path}"

    def _run(self, command: str) -> bytes:
        return self._transport.run(self._host, command, self._policy.timeout)

    def _query_stats(self) -> tuple[int, int]:
        # awk counts a final unterminated line, unlike wc -l
        command = f"awk 'END {{print NR}}' {self._quoted_path} && wc -c < {self._quoted_path}"

        def query() -> tuple[int, int]:
            out = self._run(command).decode("utf-8", errors="replace").split()
            if len(out) != 2 or not all(v.isdigit() for v in out):  # noqa: PLR2004
                raise RemoteCommandFailedError(self._host, f"unexpected stat output: {' '.join(out)!r}")
            return int(out[0]), int(out[1])

        return with_retry(
            query,
            self._policy,
            # a missing or unreadable file will not appear on a retry
            retry_on=(RemoteUnreachableError,),
            description=f"stat {self.display_name}",
            sleep=self._sleep,
        )

    def _fetch_chunk(self, key: ChunkKey) -> list[str]:
        command = f"tail -n +{key.start} {self._quoted_path} | head -n {key.count}"

        def fetch() -> list[str]:
            self.fetch_count += 1
            lines = _split_lines(self._run(command))
            if len(lines) != key.count:
                raise RemoteCommandFailedError(self._host, f"short read: expected {key.count} lines, got {len(lines)}")
            return lines

        try:
            return with_retry(
                fetch,
                self._policy,
                retry_on=(RemoteError,),
                description=f"fetch {self.display_name} lines {key.start}-{key.end}",
                sleep=self._sleep,
            )
        except RemoteError as e:
            raise RemoteFetchFailedError(self._host, self._policy.attempts, e) from e

    def _chunk(self, key: ChunkKey) -> list[str]:
        lines = self.cache.get(key)
        if lines is not None:
            logger.debug("cache hit %s", key)
            return lines
        logger.debug("cache miss %s", key)
        lines = self._fetch_chunk(key)
        self.cache.put(key, lines)
        return lines

    @override
    def _read_lines(self, start: int, count: int) -> list[str]:
        result: list[str] = []
        end = start + count - 1
        line = start
        while line <= end:
            key = ChunkKey.for_line(line, self._chunk_size, self._line_count)
            chunk = self._chunk(key)
            take_to = min(end, key.end)
            result.extend(chunk[line - key.start : take_to - key.start + 1])
            line = key.end + 1
        return result
