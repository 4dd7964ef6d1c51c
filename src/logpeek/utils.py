"""Shared utilities for logpeek."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from logpeek.models import FileLocator, LocatorKind

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry schedule for remote operations.

    ``attempts`` counts the initial try. The delay before retry ``i`` (0-based)
    is ``backoff * 2**i``, so the worst case for one call is bounded by
    ``attempts * (timeout + backoff * 2**(attempts - 1))``.
    """

    attempts: int = 3
    timeout: float = 10.0
    backoff: float = 0.5

    def delays(self) -> tuple[float, ...]:
        return tuple(self.backoff * 2**i for i in range(self.attempts - 1))


def with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> T:
    """Call ``operation`` until it succeeds or ``policy.attempts`` is exhausted.

    The last exception is re-raised unchanged once every attempt has failed.
    """
    delays = policy.delays()
    for attempt in range(policy.attempts):
        try:
            return operation()
        except retry_on as e:
            if attempt == policy.attempts - 1:
                raise
            delay = delays[attempt]
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                description,
                attempt + 1,
                policy.attempts,
                e,
                delay,
            )
            sleep(delay)
    msg = "RetryPolicy.attempts must be >= 1"
    raise ValueError(msg)


def parse_locator(value: str) -> FileLocator:
    """Parse a file locator: ``path`` (local) or ``[user@]host:path`` (remote).

    A colon form counts as remote only when the host part has no slash and the
    path part is absolute or home-relative, and no local file with that exact
    name exists.
    """
    host, sep, path = value.partition(":")
    if (
        sep
        and host
        and "/" not in host
        and "\\" not in host
        and path.startswith(("/", "~"))
        and not Path(value).exists()
    ):
        return FileLocator(kind=LocatorKind.REMOTE, host=host, path=path)
    return FileLocator(kind=LocatorKind.LOCAL, path=value)
