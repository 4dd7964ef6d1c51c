"""CLI entry point for logpeek."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated

import typer

from logpeek.config import get_log_file, load_config
from logpeek.controller import ViewController
from logpeek.errors import LogPeekError
from logpeek.logsetup import setup_logging
from logpeek.server import CommandServer
from logpeek.sources import open_source
from logpeek.worker import FileWorker

if TYPE_CHECKING:
    from logpeek.models import AppConfig
    from logpeek.sources import FileSource

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)

LocatorArg = Annotated[str, typer.Argument(help="Local path or remote HOST:/absolute/path")]
PortOption = Annotated[
    int | None, typer.Option("--port", "-p", help="Control port (next free port is used if taken)")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details")]


def _open(locator: str, config: AppConfig) -> FileSource:
    """Open the source or exit with an error message."""
    try:
        return open_source(locator, config)
    except (OSError, LogPeekError) as e:
        logger.debug("Failed to open %s", locator, exc_info=True)
        typer.echo(f"Error: cannot open {locator}: {e}")
        raise typer.Exit(1) from e


@app.command()
def view(
    locator: LocatorArg,
    port: PortOption = None,
    no_server: Annotated[bool, typer.Option("--no-server", help="Do not start the control listener")] = False,  # noqa: FBT002
    verbose: VerboseOption = False,  # noqa: FBT002
) -> None:
    """View a file in a terminal UI, controllable over a local TCP port."""
    setup_logging(verbose=verbose, log_file=get_log_file())
    config = load_config()
    source = _open(locator, config)

    from logpeek.app import LogPeekApp  # noqa: PLC0415

    peek_app = LogPeekApp(source, config, port=port, server_enabled=False if no_server else None)
    peek_app.run(mouse=False)


async def _serve(source: FileSource, config: AppConfig, port: int) -> None:
    async with FileWorker(source) as worker, ViewController(
        worker, page_size=config.page_size, search_buffer=config.search_buffer
    ) as controller, CommandServer(controller, port) as server:
        typer.echo(f"Serving {source.display_name} on 127.0.0.1:{server.port}", err=True)
        await asyncio.Event().wait()


@app.command()
def serve(
    locator: LocatorArg,
    port: PortOption = None,
    verbose: VerboseOption = False,  # noqa: FBT002
) -> None:
    """Serve the control protocol for a file without a terminal UI."""
    setup_logging(verbose=verbose)
    config = load_config()
    source = _open(locator, config)
    try:
        asyncio.run(_serve(source, config, config.port if port is None else port))
    except OSError as e:
        typer.echo(f"Error: cannot start command server: {e}")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        source.close()


def main() -> None:
    """Entry point for the CLI."""
    app()
