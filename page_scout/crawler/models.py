# page_scout/crawler/models.py
"""
Data models for the PageScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List


class CrawlState(str, Enum):
    """Lifecycle of one crawl run."""

    INIT = "init"
    VALIDATING = "validating"
    DISCOVERING = "discovering"
    FETCHING = "fetching"
    COMPLETED = "completed"
    ABORTED = "aborted"


NO_URLS_DISCOVERED = "no URLs discovered"


@dataclass(slots=True)
class CrawlPage:
    """A fetched page on its way to the sink: URL, crawl-order index and raw HTML."""

    url: str
    index: int
    content: str

    @property
    def filename(self) -> str:
        return page_filename(self.index)


@dataclass(slots=True)
class CrawlSummary:
    """Outcome of a run, reported by the CLI."""

    state: CrawlState
    crawled: int = 0
    budget: int = 0
    discovered: int = 0
    failed: int = 0
    output_dir: Path = Path(".")
    saved: List[str] = field(default_factory=list)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.state is CrawlState.COMPLETED

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "crawled": self.crawled,
            "budget": self.budget,
            "discovered": self.discovered,
            "failed": self.failed,
            "output_dir": str(self.output_dir),
            "saved": list(self.saved),
            "reason": self.reason,
        }


def page_filename(index: int) -> str:
    """``page-007.html`` for index 7 (1-based, zero-padded to 3 digits)."""
    return f"page-{index:03d}.html"
