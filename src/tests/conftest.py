from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from lobsters_tui.datamodels import Comment, Story, Via
from lobsters_tui.errors import FetchError
from lobsters_tui.sources.base import Source


def make_story(n: int, comments_number: int = 0) -> Story:
    return Story(
        votes=n,
        title=f"Story {n}",
        url=f"https://example.com/{n}",
        byline=Via("alice"),
        time="1 hour ago",
        comments_number=comments_number,
        comments_url=f"https://lobste.rs/s/{n}",
    )


class FakeSource(Source):
    """In-memory site that records every request made to it."""

    def __init__(
        self,
        total: int,
        batch_size: int = 25,
        comments: Optional[Dict[str, List[Comment]]] = None,
        comments_numbers: Optional[Dict[int, int]] = None,
    ):
        super().__init__({})
        self.batch_size = batch_size
        numbers = comments_numbers or {}
        self.stories = [make_story(n, numbers.get(n, 0)) for n in range(total)]
        self.comments = comments or {}
        self.batch_requests: List[int] = []
        self.comment_requests: List[str] = []
        self.fail_batches: set[int] = set()

    def fetch_story_batch(self, batch_index: int) -> List[Story]:
        self.batch_requests.append(batch_index)
        if batch_index in self.fail_batches:
            raise FetchError(f"https://lobste.rs/page/{batch_index}", "boom")
        start = (batch_index - 1) * self.batch_size
        return self.stories[start : start + self.batch_size]

    def fetch_comment_tree(self, locator: str) -> List[Comment]:
        self.comment_requests.append(locator)
        return list(self.comments.get(locator, []))


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def story_factory():
    return make_story
