# page_scout/errors.py
"""
Error taxonomy for PageScout.

Only :class:`ConfigurationError` (and the "no URLs discovered" outcome) ends a
run; every per-page error is logged and skipped by the crawl loop.
"""
from __future__ import annotations

from typing import Optional


class PageScoutError(Exception):
    """Base class for all PageScout errors."""


class ConfigurationError(PageScoutError):
    """Invalid configuration; raised before any network activity."""


class DiscoveryError(PageScoutError):
    """The seed listing page could not be fetched or parsed."""


class FetchError(PageScoutError):
    """A URL could not be fetched after all retry attempts."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        self.url = url
        self.status = status
        detail = f"HTTP {status}: {message}" if status is not None else message
        super().__init__(f"{url}: {detail}")


class PersistError(PageScoutError):
    """A page could not be written to the output directory."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{name}: {message}")


class MalformedURLError(PageScoutError, ValueError):
    """A candidate URL cannot be turned into an absolute URL."""


__all__ = [
    "PageScoutError",
    "ConfigurationError",
    "DiscoveryError",
    "FetchError",
    "PersistError",
    "MalformedURLError",
]
