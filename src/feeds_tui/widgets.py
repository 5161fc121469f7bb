from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import ListItem, Static
from textual.reactive import reactive
from rich.text import Text

from .datamodels import ActiveId, Preset, SourceItem


# --- UI Widgets ---
class SourceListItem(ListItem):
    def __init__(self, source: SourceItem, active: bool = False):
        super().__init__(classes="active" if active else None)
        self.source = source

    @property
    def target(self) -> ActiveId:
        return self.source.id

    def compose(self) -> ComposeResult:
        with Horizontal(classes="source-container"):
            yield Static(Text(self.source.name), classes="source-name")
            yield Static(_count_text(self.source.count), classes="source-count")


class PresetListItem(ListItem):
    """The aggregate row shown above the individual sources."""

    def __init__(self, preset: Preset, label: str, count: int, active: bool = False):
        super().__init__(classes="active" if active else None)
        self.preset = preset
        self.label = label
        self.count = count

    @property
    def target(self) -> ActiveId:
        return self.preset

    def compose(self) -> ComposeResult:
        with Horizontal(classes="source-container"):
            yield Static(self.label, classes="source-name")
            yield Static(_count_text(self.count), classes="source-count")


class StatusBar(Static):
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
            status_items.append(self.loading_status)

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()


def _count_text(count: int) -> Text:
    return Text(str(count), style="bold" if count > 0 else "dim")
