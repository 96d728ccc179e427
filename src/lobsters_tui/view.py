from __future__ import annotations

import logging
from enum import Enum
from typing import List

from .config import STORIES_PER_SITE_PAGE
from .datamodels import Story
from .errors import EmptyCollectionError
from .layout import STORY_RIGHT_MARGIN, display_story, prepend_string
from .scroll import last_offset, scroll_window
from .sources.base import Source

logger = logging.getLogger("lobsters")

COMMENTS_MARGIN = 2
NO_COMMENTS = "No comments, yet."
NO_STORIES = "No stories."


class Mode(Enum):
    LIST = "list"
    COMMENTS = "comments"


class Travel(Enum):
    """Navigation primitives. Their meaning depends on the current mode."""

    NEXT_STEP = "next_step"
    PREV_STEP = "prev_step"
    NEXT_ITEM = "next_item"
    PREV_ITEM = "prev_item"
    TOP = "top"
    BOTTOM = "bottom"


class View:
    """Navigation state of a browsing session.

    Stories are fetched lazily from ``source`` in site batches of
    ``batch_size`` and shown in display pages of ``page_size``. The two
    sizes are independent and need not divide each other.

    Moving forward in the list may leave ``list_position`` past the loaded
    stories while the site still has more; the next call to
    :meth:`ensure_loaded_for_current_page` fetches the missing batches or,
    once the site has run out, clamps the position to the last story.
    """

    def __init__(
        self,
        source: Source,
        page_size: int,
        batch_size: int = STORIES_PER_SITE_PAGE,
    ):
        self.source = source
        self.page_size = max(1, page_size)
        self.batch_size = batch_size
        self.stories: List[Story] = []
        self.mode = Mode.LIST
        self.list_position = 0
        self.comments_scroll_offset = 0
        self.exhausted = False
        self._comment_lines = 0
        self._viewport_height = 0

    # --- Accessors ---
    @property
    def current_list_position(self) -> int:
        return self.list_position

    @property
    def current_site_page_number(self) -> int:
        """1-indexed site batch the selected story comes from."""
        return self.list_position // self.batch_size + 1

    @property
    def view_page(self) -> int:
        return self.list_position // self.page_size

    def selected_story(self) -> Story:
        if not self.stories:
            raise EmptyCollectionError("No stories loaded")
        return self.stories[min(self.list_position, len(self.stories) - 1)]

    # --- Loading ---
    def load_stories(self) -> None:
        """Append the next site batch after the stories already stored."""
        batch_index = len(self.stories) // self.batch_size + 1
        batch = self.source.fetch_story_batch(batch_index)
        logger.info("Batch %d: %d stories", batch_index, len(batch))
        if len(batch) < self.batch_size:
            logger.info("Site exhausted after batch %d", batch_index)
            self.exhausted = True
        self.stories.extend(batch)

    def ensure_loaded_for_current_page(self) -> None:
        """Fetch batches until the display page holding the selection is full."""
        page_end = (self.view_page + 1) * self.page_size
        while len(self.stories) < page_end and not self.exhausted:
            self.load_stories()
        self.clamp_position()

    def clamp_position(self) -> None:
        """Pull the selection back onto the loaded stories."""
        if not self.stories:
            self.list_position = 0
        elif self.list_position >= len(self.stories):
            self.list_position = len(self.stories) - 1

    def ensure_comments_loaded(self) -> None:
        """In comments mode, fetch the selected story's thread if stale."""
        if self.mode is not Mode.COMMENTS or self.list_position >= len(self.stories):
            return
        story = self.stories[self.list_position]
        if not story.comments_stale():
            return
        logger.info("Fetching comments for %r", story.title)
        story.attach_comments(self.source.fetch_comment_tree(story.comments_url))

    def ensure_loaded(self) -> None:
        self.ensure_loaded_for_current_page()
        self.ensure_comments_loaded()

    def needs_loading(self) -> bool:
        """Whether :meth:`ensure_loaded` would change anything."""
        page_end = (self.view_page + 1) * self.page_size
        if len(self.stories) < page_end and not self.exhausted:
            return True
        if self.list_position >= len(self.stories):
            return bool(self.stories)
        return (
            self.mode is Mode.COMMENTS
            and self.stories[self.list_position].comments_stale()
        )

    # --- Navigation ---
    def go(self, travel: Travel) -> None:
        """Apply one navigation command.

        Until the site is exhausted, forward movement in List mode is not
        clamped to the loaded stories: ``list_position`` may land up to one
        display page past the tail so that
        :meth:`ensure_loaded_for_current_page` knows which batches to fetch.
        The bound ``list_position < len(stories)`` holds again once that call
        returns. After the site is exhausted it holds after every command.
        """
        if not self.stories:
            return
        if self.mode is Mode.LIST:
            self._go_list(travel)
        else:
            self._go_comments(travel)

    def _go_list(self, travel: Travel) -> None:
        if travel is Travel.NEXT_STEP:
            self._move_to(self.list_position + self.page_size)
        elif travel is Travel.PREV_STEP:
            self._move_to(self.list_position - self.page_size)
        elif travel is Travel.NEXT_ITEM:
            self._move_to(self.list_position + 1)
        elif travel is Travel.PREV_ITEM:
            self._move_to(self.list_position - 1)
        elif travel is Travel.TOP:
            self._move_to(0)
        elif travel is Travel.BOTTOM:
            self._move_to(len(self.stories) - 1)
        self.comments_scroll_offset = 0

    def _go_comments(self, travel: Travel) -> None:
        if travel is Travel.NEXT_STEP:
            self._move_to(self.list_position + 1)
            self.comments_scroll_offset = 0
        elif travel is Travel.PREV_STEP:
            self._move_to(self.list_position - 1)
            self.comments_scroll_offset = 0
        elif travel is Travel.NEXT_ITEM:
            self.comments_scroll_offset = min(
                self.comments_scroll_offset + 1, self._last_comment_offset()
            )
        elif travel is Travel.PREV_ITEM:
            self.comments_scroll_offset = max(0, self.comments_scroll_offset - 1)
        elif travel is Travel.TOP:
            self.comments_scroll_offset = 0
        elif travel is Travel.BOTTOM:
            self.comments_scroll_offset = self._last_comment_offset()

    def _move_to(self, position: int) -> None:
        position = max(0, position)
        if self.exhausted:
            position = min(position, len(self.stories) - 1)
        self.list_position = position

    def _last_comment_offset(self) -> int:
        return last_offset(self._comment_lines, self._viewport_height)

    # --- Mode ---
    def enter_comments(self) -> None:
        self.mode = Mode.COMMENTS

    def leave_comments(self) -> None:
        self.mode = Mode.LIST

    def toggle(self) -> None:
        self.mode = Mode.COMMENTS if self.mode is Mode.LIST else Mode.LIST

    # --- Rendering ---
    def render(self, width: int, height: int) -> str:
        if self.mode is Mode.LIST:
            return self._render_list(width)
        return self._render_comments(width, height)

    def _render_list(self, width: int) -> str:
        if not self.stories:
            return NO_STORIES
        start = self.view_page * self.page_size
        selected = self.list_position - start
        page = self.stories[start : start + self.page_size]
        return "\n".join(
            display_story(story, width - STORY_RIGHT_MARGIN, idx == selected)
            for idx, story in enumerate(page)
        )

    def _render_comments(self, width: int, height: int) -> str:
        self._viewport_height = height
        if not self.stories:
            return NO_STORIES
        story = self.selected_story()
        if not story.comments:
            self._comment_lines = 0
            self.comments_scroll_offset = 0
            return NO_COMMENTS
        margin = " " * COMMENTS_MARGIN
        rendered = "\n".join(
            prepend_string(comment.render(width - COMMENTS_MARGIN * 2), margin)
            for comment in story.comments
        )
        lines = rendered.split("\n")
        self._comment_lines = len(lines)
        visible, self.comments_scroll_offset = scroll_window(
            lines, self.comments_scroll_offset, height
        )
        return "\n".join(visible)
