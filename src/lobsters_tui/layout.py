from __future__ import annotations

from textwrap import wrap
from typing import TYPE_CHECKING, List

from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from .datamodels import Story

# --- Layout constants ---
VOTES_COLUMN = 5
STORY_INDENT = 3 + 2
STORY_RIGHT_MARGIN = 3
DESCRIPTION_MARKER = "☶"

BOLD = Style(bold=True)
DIM = Style(dim=True)
REVERSE = Style(reverse=True)
DOMAIN_STYLE = Style(italic=True, dim=True)


def strip_styles(text: str) -> str:
    """Remove ANSI styling sequences, keeping only what the terminal shows."""
    return Text.from_ansi(text).plain


def visible_width(text: str) -> int:
    """Number of terminal cells ``text`` occupies once styling is removed."""
    if "\x1b" not in text:
        return Text(text).cell_len
    return Text.from_ansi(text).cell_len


def _tokens(text: str) -> List[str]:
    # Zero-width tokens (bare styling sequences) are glued to a neighbouring
    # word so they never take up a separator space.
    tokens: List[str] = []
    pending = ""
    for word in text.split():
        if visible_width(word) == 0:
            if tokens:
                tokens[-1] += word
            else:
                pending += word
            continue
        tokens.append(pending + word)
        pending = ""
    if pending:
        if tokens:
            tokens[-1] += pending
        else:
            tokens.append(pending)
    return tokens


def wrap_escaped_to_lines(text: str, max_width: int) -> List[List[str]]:
    """Greedily group the words of ``text`` into lines of visible width
    at most ``max_width``.

    A word wider than ``max_width`` gets a line of its own.
    """
    max_width = max(1, max_width)
    lines: List[List[str]] = []
    current: List[str] = []
    width = 0
    for token in _tokens(text):
        token_width = visible_width(token)
        if not current:
            current = [token]
            width = token_width
        elif width + 1 + token_width <= max_width:
            current.append(token)
            width += 1 + token_width
        else:
            lines.append(current)
            current = [token]
            width = token_width
    if current:
        lines.append(current)
    return lines


def wrap_escaped(text: str, max_width: int) -> List[str]:
    return [" ".join(words) for words in wrap_escaped_to_lines(text, max_width)]


def wrap_with_indent(text: str, max_width: int, indent: int) -> str:
    """Wrap ``text`` to ``max_width`` cells, every line starting with
    ``indent`` spaces."""
    spacer = " " * indent
    lines = wrap_escaped(text, max_width - indent) or [""]
    return "\n".join(spacer + line for line in lines)


def wrap_plain(text: str, width: int) -> List[str]:
    """Wrap unstyled text by character count, keeping its line breaks."""
    width = max(1, width)
    out: List[str] = []
    for line in text.splitlines():
        if not line.strip():
            out.append("")
            continue
        out.extend(
            chunk.rstrip()
            for chunk in wrap(
                line, width, break_long_words=False, break_on_hyphens=False
            )
        )
    return out


def prepend_string(text: str, prefix: str) -> str:
    return "\n".join(prefix + line for line in text.split("\n"))


def _votes_cell(votes: int, selected: bool) -> str:
    number = str(votes)
    padded = number.center(VOTES_COLUMN)
    if not selected:
        return padded
    return padded.replace(number, REVERSE.render(number), 1)


def display_story(story: Story, columns: int, selected: bool) -> str:
    """Render a story as shown in the list.

    ::

         26  The Windows malloc() Implementation Is A Trash Fire c c++ rant erikmcclure.com
             via cadey 24 hours ago | 7 comments
    """
    title = " ".join(BOLD.render(word) for word in story.title.split())
    parts = [title]
    if story.description:
        parts.append(DESCRIPTION_MARKER)
    parts.extend(tag.styled() for tag in story.tags)
    if story.domain:
        parts.append(DOMAIN_STYLE.render(story.domain))
    upper = " ".join(parts)
    upper = wrap_with_indent(upper, columns, STORY_INDENT)

    count = story.comments_number
    lower = f"{story.byline} {story.time} | {count} comment{'' if count == 1 else 's'}"
    lower = "\n".join(
        " " * STORY_INDENT + DIM.render(line)
        for line in wrap_escaped(lower, columns - STORY_INDENT)
    )

    votes = _votes_cell(story.votes, selected)
    return f"{votes}{upper[STORY_INDENT:]}\n{lower}"
