from __future__ import annotations

from typing import List, Sequence, Tuple


def last_offset(total_lines: int, height: int) -> int:
    """Largest scroll offset that still fills a viewport of ``height`` lines."""
    return max(0, total_lines - max(0, height))


def scroll_window(
    lines: Sequence[str], offset: int, height: int
) -> Tuple[List[str], int]:
    """Return the lines visible at ``offset`` and the offset actually used.

    Content that fits in the viewport is returned whole and the offset
    collapses to 0. Otherwise the offset is clamped to
    ``[0, len(lines) - height]`` and exactly ``height`` lines are returned.
    Callers store the returned offset so out-of-range requests correct
    themselves.
    """
    height = max(0, height)
    if len(lines) <= height:
        return list(lines), 0
    clamped = min(max(0, offset), last_offset(len(lines), height))
    return list(lines[clamped : clamped + height]), clamped
