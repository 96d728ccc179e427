from __future__ import annotations

from textual.reactive import reactive
from textual.widgets import Static
from rich.markup import escape
from rich.text import Text


# --- UI Widgets ---
class StoryPane(Static):
    """Shows the text the view renders, styling sequences included."""

    def show(self, rendered: str) -> None:
        self.update(Text.from_ansi(rendered))


class StatusBar(Static):
    """Loading or error status, then the key hint.

    The status is shown as plain text; the hint may use console markup.
    """

    loading_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        status_items = []
        if self.loading_status:
            status_items.append(escape(self.loading_status))

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()


class ErrorMessage(Static):
    def __init__(self, message: str):
        super().__init__(Text(message, style="bold red"))
