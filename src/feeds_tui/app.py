from __future__ import annotations

import logging
from typing import Any, Awaitable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.worker import Worker, WorkerState
from textual.widgets import Header, Input, ListView, Static

from .actions import (
    async_create_source,
    async_mark_source_read,
    async_remove_by_id,
    async_update_name,
    load_source,
    sync,
)
from .channel.base import Channel
from .channel.local import LocalChannel
from .config import CONFIG_PATH, SOURCES_PATH, UI_DEFAULTS, save_config
from .datamodels import ActiveId, Mode, Preset
from .messages import SourcesChanged
from .selectors import select_source
from .state import SourceStore
from .widgets import PresetListItem, SourceListItem, StatusBar

logger = logging.getLogger("feeds")

WORKER_GROUP = "sources"


class FeedsApp(App):
    TITLE = "Feeds"
    SUB_TITLE = "Feed subscriptions"

    CSS = """
    #main { height: 1fr; }
    .pane-title { text-style: bold; padding: 0 1; }
    .source-container { height: 1; }
    .source-name { width: 1fr; }
    .source-count { width: 6; content-align: right middle; }
    ListItem.active { text-style: bold; background: $accent 30%; }
    StatusBar { dock: bottom; height: 1; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Sync"),
        Binding("m", "cycle_mode", "Mode"),
        Binding("a", "add_source", "Add"),
        Binding("e", "rename_source", "Rename"),
        Binding("d", "delete_source", "Delete"),
        Binding("x", "mark_read", "Mark read"),
    ]

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        channel: Optional[Channel] = None,
        config_path: str = CONFIG_PATH,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config or {}
        self.config_path = config_path
        self.channel = channel or LocalChannel(self.config.get("sources_path", SOURCES_PATH))
        self.store = SourceStore()
        self.mode = Mode(self.config.get("mode", Mode.ALL.value))
        self._input_purpose: Optional[str] = None
        self._input_source_id: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main"):
            yield Static("Sources", id="sources-title", classes="pane-title")
            yield Input(id="source-input")
            yield ListView(id="sources-list")
        yield StatusBar()

    def on_mount(self) -> None:
        self.store.subscribe(lambda state: self.post_message(SourcesChanged(state)))
        self.query_one("#source-input", Input).display = False

        keybindings_text = self.config.get("ui", {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        self.query_one(StatusBar).set_keybindings(keybindings_text.format(color="cyan"))
        self.query_one("#sources-list", ListView).focus()

        self._run(load_source(self.store, self.channel, self.mode), "source_loader")

    def _run(self, work: Awaitable[Any], name: str) -> None:
        self.run_worker(work, name=name, group=WORKER_GROUP, exit_on_error=False)

    async def on_sources_changed(self, message: SourcesChanged) -> None:
        await self._render_sources()

    async def _render_sources(self) -> None:
        # Always render the latest snapshot; queued messages may be stale.
        view = select_source(self.store.state, self.mode)
        list_view = self.query_one("#sources-list", ListView)
        highlighted = self._highlighted_target()
        items = [
            PresetListItem(
                Preset.ALL,
                "All",
                view.total_count,
                active=view.active_id == Preset.ALL,
            )
        ]
        items.extend(
            SourceListItem(source, active=source.id == view.active_id)
            for source in view.sources
        )
        await list_view.clear()
        await list_view.extend(items)

        # clear() drops the cursor; put it back on the same row, else on the selection.
        targets = [item.target for item in items]
        for wanted in (highlighted, view.active_id):
            if wanted is not None and wanted in targets:
                list_view.index = targets.index(wanted)
                break

        self.query_one("#sources-title", Static).update(f"Sources ({view.mode.value})")
        self.query_one(StatusBar).loading_status = (
            "Refreshing..." if self.store.state.refreshing else ""
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.worker.group != WORKER_GROUP:
            return
        if event.state is WorkerState.ERROR:
            error = event.worker.error
            logger.error("Worker %s failed: %s", event.worker.name, error)
            self.query_one(StatusBar).loading_status = f"Error: {error}"
            self.notify(f"{event.worker.name} failed: {error}", severity="error")

    def _highlighted_target(self) -> ActiveId:
        item = self.query_one("#sources-list", ListView).highlighted_child
        if isinstance(item, (SourceListItem, PresetListItem)):
            return item.target
        return None

    def _highlighted_source_id(self) -> Optional[int]:
        item = self.query_one("#sources-list", ListView).highlighted_child
        if isinstance(item, SourceListItem):
            return item.source.id
        return None

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, (SourceListItem, PresetListItem)):
            self.store.dispatch("set_active_id", event.item.target)

    # --- Actions ---
    def action_refresh(self) -> None:
        self._run(sync(self.store, self.channel, lambda: self.mode), "sync")

    def action_cycle_mode(self) -> None:
        modes = list(Mode)
        self.mode = modes[(modes.index(self.mode) + 1) % len(modes)]
        logger.info("Switched to %s mode", self.mode.value)
        self.config["mode"] = self.mode.value
        save_config(self.config, self.config_path)
        self._run(load_source(self.store, self.channel, self.mode), "source_loader")

    def action_add_source(self) -> None:
        self._prompt("add", "Feed URL", "")

    def action_rename_source(self) -> None:
        source_id = self._highlighted_source_id()
        if source_id is None:
            return
        item = self.query_one("#sources-list", ListView).highlighted_child
        self._prompt("rename", "New name", item.source.name, source_id)

    def action_delete_source(self) -> None:
        source_id = self._highlighted_source_id()
        if source_id is not None:
            self._run(async_remove_by_id(self.store, self.channel, source_id), "remove")

    def action_mark_read(self) -> None:
        source_id = self._highlighted_source_id()
        if source_id is not None:
            self._run(async_mark_source_read(self.store, self.channel, source_id), "mark_read")

    # --- Input handling ---
    def _prompt(
        self, purpose: str, placeholder: str, value: str, source_id: Optional[int] = None
    ) -> None:
        self._input_purpose = purpose
        self._input_source_id = source_id
        source_input = self.query_one("#source-input", Input)
        source_input.placeholder = placeholder
        source_input.value = value
        source_input.display = True
        source_input.focus()

    def _close_prompt(self) -> None:
        self._input_purpose = None
        self._input_source_id = None
        self.query_one("#source-input", Input).display = False
        self.query_one("#sources-list", ListView).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "source-input":
            return
        value = event.value.strip()
        purpose, source_id = self._input_purpose, self._input_source_id
        self._close_prompt()
        if not value:
            return
        if purpose == "add":
            self._run(async_create_source(self.store, self.channel, value), "create")
        elif purpose == "rename" and source_id is not None:
            self._run(async_update_name(self.store, self.channel, source_id, value), "rename")

    def on_input_blur(self, event: Input.Blur) -> None:
        if event.input.id == "source-input" and self._input_purpose is not None:
            self._close_prompt()
