from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, NavigableString, Tag as Element
from bs4 import Comment as MarkupComment
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    BASE_URL,
    HTTP_TIMEOUT,
    INITIAL_RETRY_DELAY,
    REQUEST_HEADERS,
    RETRY_ATTEMPTS,
)
from ..datamodels import AuthoredBy, Byline, Comment, Story, Via
from ..errors import FetchError, ParseError
from ..tags import Tag
from .base import Source

logger = logging.getLogger("lobsters")

STORY_SELECTOR = "ol.stories > .story > .story_liner"

# Children of .comment_text that start a block of their own.
BLOCK_TAGS = frozenset(
    ["p", "pre", "ul", "ol", "blockquote", "div", "hr", "table"]
    + [f"h{n}" for n in range(1, 7)]
)


class LobstersSource(Source):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.base_url = self.config.get("base_url", BASE_URL).rstrip("/")
        self.timeout = self.config.get("http_timeout", HTTP_TIMEOUT)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=3, backoff_factor=0.3, status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _retryable_fetch(self, url: str, attempts: int = RETRY_ATTEMPTS) -> bytes:
        delay = INITIAL_RETRY_DELAY
        for attempt in range(1, attempts + 1):
            try:
                logger.debug("Fetching %s (attempt %d/%d)", url, attempt, attempts)
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                logger.debug("Fetched %s (%s)", url, resp.status_code)
                return resp.content
            except requests.RequestException as e:
                logger.debug("Fetch attempt %d failed for %s: %s", attempt, url, e)
                if attempt == attempts:
                    logger.warning("All fetch attempts failed for %s", url)
                    raise FetchError(url, str(e)) from e
                time.sleep(delay)
                delay *= 2
        raise FetchError(url, "no attempts made")

    def batch_url(self, batch_index: int) -> str:
        return f"{self.base_url}/page/{batch_index}"

    def fetch_story_batch(self, batch_index: int) -> List[Story]:
        url = self.batch_url(batch_index)
        content = self._retryable_fetch(url)
        soup = BeautifulSoup(content, "lxml")
        try:
            stories = [
                story_from_html(liner, self.base_url)
                for liner in soup.select(STORY_SELECTOR)
            ]
        except ParseError as e:
            logger.error("Failed to parse stories from %s: %s", url, e)
            raise
        logger.info("Loaded %d stories from %s", len(stories), url)
        return stories

    def fetch_comment_tree(self, locator: str) -> List[Comment]:
        content = self._retryable_fetch(locator)
        soup = BeautifulSoup(content, "lxml")
        try:
            comments = comments_from_html(soup)
        except ParseError as e:
            logger.error("Failed to parse comments from %s: %s", locator, e)
            raise
        logger.info("Loaded %d top-level comments from %s", len(comments), locator)
        return comments


# --- Story extraction ---
def _select_text(el: Element, selector: str) -> str:
    node = el.select_one(selector)
    if node is None:
        raise ParseError(f"Missing element {selector!r}")
    return node.get_text(strip=True)


def _byline_from_html(byline: Element) -> Byline:
    words = [s.strip() for s in byline.strings if s.strip()]
    if not words:
        raise ParseError("Empty byline")
    user = _select_text(byline, ".u-author")
    kind = words[0]
    if kind == "via":
        return Via(user)
    if kind == "authored by":
        return AuthoredBy(user)
    raise ParseError(f"Cannot parse {kind!r} into a byline")


def _comments_count(label: str) -> int:
    first = label.split()[0] if label.split() else ""
    if first == "no":
        return 0
    try:
        return int(first)
    except ValueError as e:
        raise ParseError(f"Cannot parse comment count from {label!r}") from e


def story_from_html(liner: Element, base_url: str = BASE_URL) -> Story:
    """Build a Story from one ``.story_liner`` element of a listing page."""
    try:
        votes = int(_select_text(liner, ".voters > .score"))
    except ValueError as e:
        raise ParseError("Story score is not a number") from e

    link = liner.select_one(".details > .link > a")
    if link is None or not link.get("href"):
        raise ParseError("Story has no link")
    description = liner.select_one(".details > a.description_present") is not None
    url = link["href"]
    if description:
        url = urljoin(base_url + "/", url)

    byline_el = liner.select_one(".details > .byline")
    if byline_el is None:
        raise ParseError("Story has no byline")

    comments_link = byline_el.select_one(".comments_label > a")
    if comments_link is None:
        raise ParseError("Story has no comments link")

    domain_el = liner.select_one(".details > .domain")

    return Story(
        votes=votes,
        title=link.get_text(strip=True),
        url=url,
        byline=_byline_from_html(byline_el),
        time=_select_text(byline_el, ":scope > span"),
        comments_number=_comments_count(comments_link.get_text(" ", strip=True)),
        comments_url=urljoin(base_url + "/", comments_link.get("href", "")),
        description=description,
        tags=tuple(
            Tag.from_code(t.get_text(strip=True))
            for t in liner.select(".details > .tags > .tag")
        ),
        domain=domain_el.get_text(strip=True) if domain_el else None,
    )


# --- Comment extraction ---
def _subtrees(ol: Optional[Element]) -> List[Element]:
    if ol is None:
        return []
    return ol.find_all("li", class_="comments_subtree", recursive=False)


def _squash(text: str) -> str:
    return " ".join(text.split())


def _block_text(el: Element) -> str:
    if el.name == "pre":
        lines = el.get_text().strip("\n").splitlines()
        return "\n".join(line.rstrip() for line in lines)
    if el.name in ("ul", "ol"):
        items = []
        for n, li in enumerate(el.find_all("li", recursive=False), 1):
            marker = f"{n}." if el.name == "ol" else "-"
            items.append(f"{marker} {_squash(li.get_text())}")
        return "\n".join(items)
    if el.name == "div":
        return "\n\n".join(_text_blocks(el))
    if el.name == "blockquote":
        quoted = "\n\n".join(_text_blocks(el)).split("\n")
        return "\n".join(f"> {line}" if line else ">" for line in quoted)
    return _squash(el.get_text())


def _text_blocks(container: Element) -> List[str]:
    """Text of each block under ``container``, in document order.

    Runs of bare text and inline markup between blocks form a paragraph of
    their own. Preformatted blocks keep their line breaks.
    """
    blocks: List[str] = []
    inline: List[str] = []
    for node in container.children:
        if isinstance(node, MarkupComment):
            continue
        if isinstance(node, Element) and node.name in BLOCK_TAGS:
            blocks.append(_squash("".join(inline)))
            inline = []
            blocks.append(_block_text(node))
        elif isinstance(node, Element):
            inline.append(node.get_text())
        elif isinstance(node, NavigableString):
            inline.append(str(node))
    blocks.append(_squash("".join(inline)))
    return [block for block in blocks if block.strip()]


def _comment_body(body: Optional[Element]) -> str:
    if body is None:
        return ""
    for br in body.find_all("br"):
        br.replace_with(" ")
    return "\n\n".join(_text_blocks(body))


def _comment_fields(div: Element, children: Tuple[Comment, ...]) -> Comment:
    score = div.select_one(".score")
    score_text = score.get_text(strip=True) if score else ""
    votes = int(score_text) if score_text.lstrip("-").isdigit() else 0

    authors = [
        a.get_text(strip=True)
        for a in div.select(".byline a[href^='/~']")
        if a.get_text(strip=True)
    ]
    if not authors:
        raise ParseError("Comment has no author")

    when = div.select_one(".byline span[title]") or div.select_one(".byline time")

    return Comment(
        votes=max(0, votes),
        author=authors[-1],
        time=when.get_text(strip=True) if when else "",
        body=_comment_body(div.select_one(".comment_text")),
        children=children,
    )


def comments_from_html(soup: BeautifulSoup) -> List[Comment]:
    """Build the comment forest of a story page.

    The page nests ``ol.comments > li.comments_subtree`` to arbitrary
    depth; the walk uses an explicit stack and builds each comment after
    its children.
    """
    # Pre-order list of (comment element, parent index).
    nodes: List[Tuple[Element, int]] = []
    stack = [(li, -1) for li in reversed(_subtrees(soup.select_one("ol.comments")))]
    while stack:
        li, parent = stack.pop()
        div = li.find("div", class_="comment", recursive=False)
        if div is None:
            continue
        index = len(nodes)
        nodes.append((div, parent))
        nested = li.find("ol", class_="comments", recursive=False)
        stack.extend((child, index) for child in reversed(_subtrees(nested)))

    children: List[List[Comment]] = [[] for _ in nodes]
    top_level: List[Comment] = []
    for index in reversed(range(len(nodes))):
        div, parent = nodes[index]
        comment = _comment_fields(div, tuple(reversed(children[index])))
        if parent < 0:
            top_level.append(comment)
        else:
            children[parent].append(comment)
    top_level.reverse()
    return top_level
