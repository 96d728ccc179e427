"""Exceptions raised by the lobsters client.

Hierarchy:
    LobstersError
    ├── FetchError             network failure or HTTP error status
    ├── ParseError             page markup did not have the expected shape
    │   └── UnknownTagError    tag code outside the tag catalog
    └── EmptyCollectionError   selection requested with no stories loaded

Network and markup failures surface at the source boundary as FetchError or
ParseError. Nothing in the view retries them; the app decides what to do.
"""

from __future__ import annotations


class LobstersError(Exception):
    """Root exception for all application-level errors."""


class FetchError(LobstersError):
    """Raised when a page cannot be retrieved from the site."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Failed to fetch {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(LobstersError):
    """Raised when a fetched page cannot be turned into stories or comments."""


class UnknownTagError(ParseError):
    """Raised for a tag code that is not in the catalog."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown tag: {code!r}")


class EmptyCollectionError(LobstersError):
    """Raised when a story is requested before any story has been loaded."""
