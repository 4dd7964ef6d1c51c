"""Tests for the Textual front end and highlight styles."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from rich.color import Color

from logpeek.app import LogPeekApp
from logpeek.colors import mark_color, mark_style
from logpeek.commands import Goto, Mark, Search, SearchNext
from logpeek.models import AppConfig
from logpeek.sources import MappedSource
from logpeek.widgets.line_view import LineView
from logpeek.widgets.status_bar import StatusBar, _format_count, _format_size

if TYPE_CHECKING:
    from pathlib import Path


class TestColors:
    def test_named(self) -> None:
        assert mark_color("red") == Color.parse("red")

    def test_multi_word(self) -> None:
        assert mark_color("bright blue") == Color.parse("bright_blue")

    def test_hex(self) -> None:
        assert mark_color("#ff8800").get_truecolor() == Color.parse("#ff8800").get_truecolor()

    def test_unknown_falls_back(self) -> None:
        assert mark_color("not a colour") == Color.parse("#e5c07b")

    def test_foreground_contrast(self) -> None:
        assert mark_style("#ffffff").color == Color.parse("#000000")
        assert mark_style("#000080").color == Color.parse("#ffffff")


class TestStatusBarFormatting:
    def test_counts(self) -> None:
        assert _format_count(999) == "999"
        assert _format_count(12_345) == "12K"
        assert _format_count(2_500_000) == "2.5M"

    def test_sizes(self) -> None:
        assert _format_size(512) == "512 B"
        assert _format_size(2048) == "2.0 KiB"
        assert _format_size(3 * 1024**3) == "3.0 GiB"


class TestLogPeekApp:
    @pytest.mark.asyncio
    async def test_arrow_keys_move_cursor(self, numbered_file: Path) -> None:
        app = LogPeekApp(MappedSource(numbered_file), AppConfig(), server_enabled=False)
        async with app.run_test() as pilot:
            await pilot.pause()
            for _ in range(2):
                await pilot.press("down")
                await app.workers.wait_for_complete()
            assert app.controller.state.cursor == 3
            await pilot.press("end")
            await app.workers.wait_for_complete()
            assert app.controller.state.cursor == 1000

    @pytest.mark.asyncio
    async def test_remote_commands_update_view(self, numbered_file: Path) -> None:
        app = LogPeekApp(MappedSource(numbered_file), AppConfig(), server_enabled=False)
        async with app.run_test() as pilot:
            await pilot.pause()
            await app.controller.submit(Goto(500))
            await app.controller.submit(Mark(501, "red", (1, 5)))
            await app.controller.submit(Search("line 50"))
            await app.controller.submit(SearchNext())
            await pilot.pause()
            view = app.query_one("#line-view", LineView)
            assert view.top == app.controller.state.top
            status = app.query_one("#status-bar", StatusBar)
            assert "Ln 500" in status.render().plain

    @pytest.mark.asyncio
    async def test_server_starts_and_stops(self, numbered_file: Path) -> None:
        app = LogPeekApp(MappedSource(numbered_file), AppConfig(), port=0)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert app.server is not None
            assert app.server.port is not None
            assert f":{app.server.port}" in app.query_one("#status-bar", StatusBar).render().plain

    @pytest.mark.asyncio
    async def test_toggle_theme_saves(self, numbered_file: Path) -> None:
        app = LogPeekApp(MappedSource(numbered_file), AppConfig(), server_enabled=False)
        with patch("logpeek.app.save_config") as mock_save:
            async with app.run_test() as pilot:
                await pilot.press("t")
                await pilot.pause()
                assert app.theme == "textual-light"
        saved = mock_save.call_args.args[0]
        assert saved.theme == "textual-light"
