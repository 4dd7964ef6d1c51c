"""Logging configuration.

While the TUI is running it owns the terminal, so records go to a plain log
file. Headless runs log to stderr through rich.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from pathlib import Path

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure the ``logpeek`` logger hierarchy.

    Args:
        verbose: Log DEBUG records (cache hits, remote commands, every command received).
        log_file: Write to this file instead of stderr.
    """
    root = logging.getLogger("logpeek")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for old in root.handlers:
        old.close()
    root.handlers.clear()
    root.propagate = False

    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
