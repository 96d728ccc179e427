from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..datamodels import Comment, Story


class Source(ABC):
    """Abstract base class for a site the client can browse.

    Implementations raise FetchError when the site cannot be reached and
    ParseError when a page does not have the expected shape.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @abstractmethod
    def fetch_story_batch(self, batch_index: int) -> List[Story]:
        """Return the stories of the 1-indexed site page ``batch_index``,
        in the order the site lists them."""

    @abstractmethod
    def fetch_comment_tree(self, locator: str) -> List[Comment]:
        """Return the top-level comments found at ``locator``."""
