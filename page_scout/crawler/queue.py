"""URL queue for one crawl run: FIFO of pending URLs plus the visited set."""
from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Optional, Set

from page_scout.crawler.urls import normalize_url


class CrawlQueue:
    """
    Pending URLs in FIFO order and the set of visited URLs.

    Every URL is normalized before it is stored or compared. A visited URL is
    never queued again and a pending URL is not inserted twice.
    """

    def __init__(self) -> None:
        self._pending: Deque[str] = deque()
        self._pending_set: Set[str] = set()
        self._visited: Set[str] = set()

    def add(self, url: str) -> bool:
        """Queue *url* unless it is unusable, visited or already pending. Returns True if queued."""
        normalized = normalize_url(url)
        if normalized is None:
            return False
        if normalized in self._visited or normalized in self._pending_set:
            return False
        self._pending.append(normalized)
        self._pending_set.add(normalized)
        return True

    def add_many(self, urls: Iterable[str]) -> int:
        """Queue *urls* in order; returns how many were actually added."""
        return sum(1 for url in urls if self.add(url))

    def next(self) -> Optional[str]:
        """Pop the oldest pending URL, or ``None`` when the queue is empty."""
        if not self._pending:
            return None
        url = self._pending.popleft()
        self._pending_set.discard(url)
        return url

    def mark_visited(self, url: str) -> None:
        normalized = normalize_url(url)
        if normalized is not None:
            self._visited.add(normalized)

    def has_visited(self, url: str) -> bool:
        normalized = normalize_url(url)
        return normalized is not None and normalized in self._visited

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def is_empty(self) -> bool:
        return not self._pending

    def clear(self) -> None:
        """Drop pending URLs, keep the visited set."""
        self._pending.clear()
        self._pending_set.clear()

    def reset(self) -> None:
        self.clear()
        self._visited.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        normalized = normalize_url(url)
        return normalized is not None and normalized in self._pending_set


__all__ = ["CrawlQueue"]
