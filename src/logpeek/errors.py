"""Exception taxonomy for logpeek.

Every error carries a message that is already in the wording of the control
protocol, so the controller can reply with ``ERROR <str(exc)>`` directly.
"""

from __future__ import annotations


class LogPeekError(Exception):
    """Base class for all recoverable logpeek errors."""


class InvalidArgumentError(LogPeekError):
    """Malformed or missing command argument."""


class OutOfRangeError(LogPeekError):
    """Line or column beyond the bounds of the open file."""

    @classmethod
    def for_line(cls, requested: int, line_count: int) -> OutOfRangeError:
        return cls(f"line out of range: requested {requested}, file has {line_count} lines")


class NotMarkedError(LogPeekError):
    """Unmark target does not exist."""

    def __init__(self, line: int) -> None:
        super().__init__(f"line {line} is not marked")
        self.line = line


class InvalidPatternError(LogPeekError):
    """Search pattern failed to compile."""


class NoActiveSearchError(LogPeekError):
    def __init__(self) -> None:
        super().__init__("no active search")


class NoMoreMatchesError(LogPeekError):
    def __init__(self) -> None:
        super().__init__("no more matches")


class RemoteError(LogPeekError):
    """Base class for faults talking to a remote host."""

    def __init__(self, host: str, message: str) -> None:
        super().__init__(f"{host}: {message}")
        self.host = host


class RemoteUnreachableError(RemoteError):
    """The connection to the remote host could not be established."""


class RemoteCommandFailedError(RemoteError):
    """The host answered but the remote command failed."""


class RemoteFetchFailedError(RemoteError):
    """A remote fetch failed on every retry attempt."""

    def __init__(self, host: str, attempts: int, last_error: Exception) -> None:
        LogPeekError.__init__(self, f"fetch failed after {attempts} attempts: {last_error}")
        self.host = host
        self.attempts = attempts
        self.last_error = last_error
