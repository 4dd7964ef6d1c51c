"""Modal one-line prompt used for goto and search."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.binding import BindingType


class PromptDialog(ModalScreen[str | None]):
    """Ask for a single value. Dismisses with the text, or None on cancel."""

    DEFAULT_CSS = """
    PromptDialog {
        align: center middle;
    }

    PromptDialog > Vertical {
        width: 70;
        height: auto;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }

    PromptDialog > Vertical > .title {
        text-style: bold;
    }

    PromptDialog > Vertical > Input {
        width: 100%;
        margin-top: 1;
    }

    PromptDialog > Vertical > .hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, *, value: str = "", placeholder: str = "", numeric: bool = False) -> None:
        super().__init__()
        self._title = title
        self._value = value
        self._placeholder = placeholder
        self._numeric = numeric

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(self._title, classes="title")
            yield Input(
                value=self._value,
                placeholder=self._placeholder,
                type="integer" if self._numeric else "text",
                id="prompt-input",
            )
            yield Label("Enter to confirm, Escape to cancel", classes="hint")

    def on_mount(self) -> None:
        self.query_one("#prompt-input", Input).focus()

    def on_input_submitted(self, _event: Input.Submitted) -> None:
        text = self.query_one("#prompt-input", Input).value.strip()
        self.dismiss(text or None)

    def action_cancel(self) -> None:
        self.dismiss(None)
