"""Help screen showing all keyboard shortcuts."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from typing_extensions import override

from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.binding import BindingType

HELP_TEXT = """\
[bold]Navigation[/bold]
  Up/Down                               Move the cursor
  PgUp/PgDn                             Move the cursor one page
  Home/End                              Jump to first/last line
  :                                     Go to line number

[bold]Search[/bold]
  /                                     Search (regex, around the viewport)
  n                                     Next match
  N                                     Previous match
  Escape                                Clear search

  Only lines near the viewport are searched. Scrolling far away
  re-runs the search around the new position.

[bold]Remote control[/bold]
  While the viewer runs, a text command listener accepts one
  command per line on 127.0.0.1 (port shown in the status bar):

  goto N, lines, top, size, cursor [N]
  mark N [START-END] COLOR, unmark N [START-END]
  search REGEX, search-next, search-prev, search-clear

[bold]Theme[/bold]
  t                                     Toggle dark/light theme

[bold]General[/bold]
  h                                     Show this help
  q                                     Quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal help screen with keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > VerticalScroll {
        width: 60%;
        height: 90%;
        max-height: 35;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        ("escape", "dismiss_help", "Close"),
        ("h", "dismiss_help", "Close"),
        ("q", "dismiss_help", "Close"),
    ]

    @override
    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(HELP_TEXT, markup=True)

    def action_dismiss_help(self) -> None:
        self.dismiss(None)
