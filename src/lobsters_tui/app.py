from __future__ import annotations

import logging
import webbrowser
from typing import Any, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Header
from textual.worker import Worker, WorkerState

from .config import UI_DEFAULTS, display_page_size
from .errors import EmptyCollectionError
from .sources.base import Source
from .view import Travel, View
from .widgets import ErrorMessage, StatusBar, StoryPane

logger = logging.getLogger("lobsters")

LOADER = "view_loader"


class LobstersApp(App):
    TITLE = "Lobsters"
    SUB_TITLE = "page 1"

    CSS = """
    #body {
        height: 1fr;
    }
    StoryPane {
        height: 1fr;
        padding: 0 0;
    }
    ErrorMessage {
        height: auto;
        padding: 0 1;
    }
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    # Priority bindings: tab and enter must not be taken by focus handling.
    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("J,shift+j", "travel('next_step')", "Next page", priority=True),
        Binding("K,shift+k", "travel('prev_step')", "Previous page", priority=True),
        Binding("j,down", "travel('next_item')", "Down", priority=True),
        Binding("k,up", "travel('prev_item')", "Up", priority=True),
        Binding("g", "travel('top')", "Top", priority=True),
        Binding("G,shift+g", "travel('bottom')", "Bottom", priority=True),
        Binding("l,right", "enter_comments", "Comments", priority=True),
        Binding("h,left", "leave_comments", "Stories", priority=True),
        Binding("c,tab", "toggle_comments", "Toggle comments", priority=True),
        Binding("o,enter", "open_in_browser", "Open", priority=True),
        Binding("r", "retry", "Retry", priority=True),
    ]

    def __init__(
        self,
        source: Source,
        config: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.source = source
        self.config = config or {}
        self.view: Optional[View] = None
        self.loading = False
        self.last_error: Optional[BaseException] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="body"):
            yield StoryPane(id="story-pane")
        yield StatusBar()

    def on_mount(self) -> None:
        self.view = View(self.source, display_page_size(self.size.height))
        logger.info(
            "Terminal %dx%d, %d stories per page",
            self.size.width,
            self.size.height,
            self.view.page_size,
        )
        keybindings_text = self.config.get("ui", {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        self.query_one(StatusBar).set_keybindings(keybindings_text)
        self.load()

    # --- Loading ---
    def load(self) -> None:
        """Bring the view up to date in a worker, then redraw."""
        if self.view is None or self.loading:
            return
        self.loading = True
        self.query_one(StatusBar).loading_status = "Loading..."
        self.run_worker(
            self.view.ensure_loaded,
            name=LOADER,
            thread=True,
            exclusive=True,
            exit_on_error=False,
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if getattr(event.worker, "name", None) != LOADER:
            return
        if event.state is WorkerState.SUCCESS:
            self._handle_loaded()
        elif event.state is WorkerState.ERROR:
            self._handle_load_error(event.worker.error)
        elif event.state is WorkerState.CANCELLED:
            self.loading = False

    def _handle_loaded(self) -> None:
        self.loading = False
        self.last_error = None
        self.query_one(StatusBar).loading_status = ""
        for message in self.query(ErrorMessage):
            message.remove()
        self.render_view()

    def _handle_load_error(self, error: Optional[BaseException]) -> None:
        self.loading = False
        self.last_error = error
        logger.error("Loading failed: %s", error)
        self.query_one(StatusBar).loading_status = f"Error: {error} (r to retry)"
        for message in self.query(ErrorMessage):
            message.remove()
        self.query_one("#body").mount(
            ErrorMessage(f"Failed to load: {error}"), before=0
        )
        self.view.clamp_position()
        self.render_view()

    def render_view(self) -> None:
        if self.view is None:
            return
        pane = self.query_one(StoryPane)
        width = pane.size.width or self.size.width
        height = pane.size.height or self.size.height
        pane.show(self.view.render(width, height))
        self.sub_title = f"page {self.view.current_site_page_number}"

    def _apply(self) -> None:
        if self.view.needs_loading():
            self.load()
        else:
            self.render_view()

    # --- Actions ---
    def action_travel(self, travel: str) -> None:
        if self.view is None or self.loading:
            return
        self.view.go(Travel(travel))
        self._apply()

    def action_enter_comments(self) -> None:
        if self.view is None or self.loading:
            return
        self.view.enter_comments()
        self._apply()

    def action_leave_comments(self) -> None:
        if self.view is None or self.loading:
            return
        self.view.leave_comments()
        self._apply()

    def action_toggle_comments(self) -> None:
        if self.view is None or self.loading:
            return
        self.view.toggle()
        self._apply()

    def action_open_in_browser(self) -> None:
        if self.view is None:
            return
        try:
            story = self.view.selected_story()
        except EmptyCollectionError:
            return
        logger.info("Opening %s", story.url)
        webbrowser.open(story.url)

    def action_retry(self) -> None:
        if self.last_error is not None:
            self.load()
