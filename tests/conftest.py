# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Callable, Dict, List, Union

import pytest
from aiohttp import web

from page_scout.config import ENV_VARS, PROXY_ENV_VARS, CrawlerConfig
from page_scout.errors import FetchError
from page_scout.logger import configure

BASE_URL = "https://www.example.com"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment (proxies, OUTPUT_DIR…) out of the tests."""
    for var in (*ENV_VARS, *PROXY_ENV_VARS):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def fresh_logging():
    """Bind the project logger to the stdout of the current test."""
    configure(level="DEBUG")


@pytest.fixture()
def make_config(tmp_path) -> Callable[..., CrawlerConfig]:
    """
    Factory for a fast CrawlerConfig: no delay, no backoff, output under tmp_path.
    """

    def factory(**overrides) -> CrawlerConfig:
        values = dict(
            base_url=BASE_URL,
            max_pages=50,
            output_dir=tmp_path / "out",
            delay_ms=0,
            http_timeout_ms=2000,
            retries=0,
            backoff_ms=0,
        )
        values.update(overrides)
        return CrawlerConfig(**values)

    return factory


class FakeFetcher:
    """Stands in for Fetcher: serves canned bodies, raises FetchError for unknown URLs."""

    def __init__(self, pages: Dict[str, Union[str, Exception]]) -> None:
        self.pages = pages
        self.calls: List[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        body = self.pages.get(url)
        if body is None:
            raise FetchError(url, "not found", status=404)
        if isinstance(body, Exception):
            raise body
        return body


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free local port, yield its base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


def listing_html(*hrefs: str, nav: tuple[tuple[str, str], ...] = ()) -> str:
    """Small listing page: plain anchors plus an optional pagination block."""
    links = "".join(f'<a href="{h}">item</a>' for h in hrefs)
    pager = "".join(f'<a href="{h}">{text}</a>' for h, text in nav)
    return f"<html><body>{links}<ul class='pagination'>{pager}</ul></body></html>"


def read_page(out: Path, index: int) -> str:
    return (out / f"page-{index:03d}.html").read_text(encoding="utf-8")
