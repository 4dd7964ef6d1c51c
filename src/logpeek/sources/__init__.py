"""File sources and locator-based selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from logpeek.errors import InvalidArgumentError
from logpeek.models import AppConfig, FileLocator, LocatorKind
from logpeek.sources.base import FileSource
from logpeek.sources.mapped import MappedSource
from logpeek.sources.remote import RemoteSource, SshTransport, Transport
from logpeek.utils import RetryPolicy, parse_locator

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    "FileSource",
    "MappedSource",
    "RemoteSource",
    "SshTransport",
    "Transport",
    "open_source",
    "retry_policy",
]


def retry_policy(config: AppConfig) -> RetryPolicy:
    """Build the remote retry policy from config."""
    return RetryPolicy(
        attempts=config.remote_attempts,
        timeout=config.remote_timeout,
        backoff=config.remote_backoff,
    )


def open_source(
    locator: str | FileLocator,
    config: AppConfig | None = None,
    *,
    transport_factory: Callable[[AppConfig], Transport] | None = None,
) -> FileSource:
    """Open the concrete source for a locator. This is the only place the kind is chosen."""
    cfg = config or AppConfig()
    loc = parse_locator(locator) if isinstance(locator, str) else locator

    if loc.kind == LocatorKind.LOCAL:
        return MappedSource(loc.path)

    if loc.host is None:
        msg = f"remote locator without a host: {loc.path}"
        raise InvalidArgumentError(msg)
    transport = transport_factory(cfg) if transport_factory else SshTransport(cfg.ssh_command)
    return RemoteSource(
        loc.host,
        loc.path,
        transport,
        chunk_size=cfg.chunk_size,
        cache_chunks=cfg.cache_chunks,
        policy=retry_policy(cfg),
    )
