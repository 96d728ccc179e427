from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .layout import BOLD, DIM, wrap_escaped, wrap_plain
from .tags import Tag

COMMENT_INDENT = "│ "
# Right-hand cell kept free at every nesting level.
COMMENT_WIDTH_ADJUSTMENT = -1
MIN_COMMENT_WIDTH = 10


# --- Data models ---
@dataclass(frozen=True)
class AuthoredBy:
    user: str

    def __str__(self) -> str:
        return f"authored by {self.user}"


@dataclass(frozen=True)
class Via:
    user: str

    def __str__(self) -> str:
        return f"via {self.user}"


Byline = Union[AuthoredBy, Via]


def comment_width(width: int, depth: int) -> int:
    """Width budget of a comment nested ``depth`` levels below the top."""
    step = len(COMMENT_INDENT) - COMMENT_WIDTH_ADJUSTMENT
    return max(MIN_COMMENT_WIDTH, width - depth * step)


def indent_depth(width: int, depth: int) -> int:
    """Nesting levels actually drawn for a comment at ``depth``.

    Past this level the indent stops growing, so the prefix and the wrapped
    text together never exceed ``width``.
    """
    step = len(COMMENT_INDENT) - COMMENT_WIDTH_ADJUSTMENT
    return min(depth, max(0, (width - MIN_COMMENT_WIDTH) // step))


@dataclass(frozen=True)
class Comment:
    votes: int
    author: str
    time: str
    body: str
    children: Tuple[Comment, ...] = ()

    def descendant_count(self) -> int:
        """Size of this subtree, the comment itself included."""
        count = 0
        stack = [self]
        while stack:
            comment = stack.pop()
            count += 1
            stack.extend(comment.children)
        return count

    def header(self) -> str:
        return f"{BOLD.render(str(self.votes))} {self.author} {DIM.render(self.time)}"

    def render(self, width: int) -> str:
        """Render the thread rooted at this comment.

        Children follow their parent, each nesting level prefixed with
        ``COMMENT_INDENT`` and given a narrower width. The walk is iterative
        so thread depth is not bounded by the interpreter's recursion limit.
        """
        lines: List[str] = []
        stack: List[Tuple[Comment, int]] = [(self, 0)]
        while stack:
            comment, depth = stack.pop()
            shown = indent_depth(width, depth)
            prefix = COMMENT_INDENT * shown
            budget = comment_width(width, shown)
            for line in wrap_escaped(comment.header(), budget):
                lines.append(prefix + line)
            for line in wrap_plain(comment.body, budget):
                lines.append(prefix + line)
            stack.extend((child, depth + 1) for child in reversed(comment.children))
        return "\n".join(lines)


@dataclass
class Story:
    votes: int
    title: str
    url: str
    byline: Byline
    time: str
    comments_number: int = 0
    comments_url: str = ""
    description: bool = False
    tags: Tuple[Tag, ...] = ()
    domain: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    _comments_fetched_for: Optional[int] = field(default=None, repr=False, compare=False)

    def comments_descendants(self) -> int:
        return sum(comment.descendant_count() for comment in self.comments)

    def comments_stale(self) -> bool:
        """Whether the comment tree should be (re)fetched.

        The site's ``comments_number`` is authoritative. A tree whose size
        disagrees with it is stale, unless it was already fetched while the
        story reported that same number.
        """
        if self.comments_descendants() == self.comments_number:
            return False
        return self._comments_fetched_for != self.comments_number

    def attach_comments(self, comments: List[Comment]) -> None:
        self.comments = list(comments)
        self._comments_fetched_for = self.comments_number
