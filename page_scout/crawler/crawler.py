# page_scout/crawler/crawler.py
"""
Crawl orchestration: seed discovery, then a sequential fetch → save loop
with a page budget and a pause between successful requests.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

from aiohttp import ClientSession
from pydantic import ValidationError

from page_scout.config import CrawlerConfig
from page_scout.crawler.fetcher import Fetcher, create_session
from page_scout.crawler.link_extractor import ExtractionRules, extract_links
from page_scout.crawler.models import NO_URLS_DISCOVERED, CrawlPage, CrawlState, CrawlSummary
from page_scout.crawler.queue import CrawlQueue
from page_scout.crawler.urls import require_url
from page_scout.errors import ConfigurationError, DiscoveryError, FetchError, MalformedURLError, PersistError
from page_scout.logger import get_logger
from page_scout.storage import FileStore

__all__ = ("ListingCrawler", "PROGRESS_EVERY")

PROGRESS_EVERY = 10

SleepFn = Callable[[float], Awaitable[None]]


class ListingCrawler:
    """
    Crawl one site sequentially.

    Usage::

        async with ListingCrawler(config) as crawler:
            summary = await crawler.crawl()

    A *fetcher* and *store* may be injected; otherwise an aiohttp session and
    a :class:`FileStore` on ``config.output_dir`` are created.
    """

    def __init__(
        self,
        config: Union[CrawlerConfig, Mapping[str, Any]],
        *,
        fetcher: Optional[Fetcher] = None,
        store: Optional[FileStore] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.state = CrawlState.INIT
        self.logger = get_logger("crawler")
        self.config = self._validate_config(config)
        self.rules = ExtractionRules.from_config(self.config)
        self.queue = CrawlQueue()
        self.fetcher = fetcher
        self.store = store if store is not None else FileStore(self.config.output_dir)
        self.session: Optional[ClientSession] = None
        self._sleep = sleep

    async def __aenter__(self) -> ListingCrawler:
        if self.fetcher is None:
            self.session = create_session(self.config)
            self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def _validate_config(self, config: Union[CrawlerConfig, Mapping[str, Any]]) -> CrawlerConfig:
        self.state = CrawlState.VALIDATING
        if isinstance(config, CrawlerConfig):
            return config
        try:
            return CrawlerConfig(**dict(config))
        except (ValidationError, TypeError) as exc:
            self.state = CrawlState.ABORTED
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def _require_fetcher(self) -> Fetcher:
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized, use 'async with ListingCrawler(...)'")
        return self.fetcher

    async def discover(self, start_url: Optional[str] = None) -> List[str]:
        """Fetch the listing page and return the seed URLs found on it (``[]`` on failure)."""
        self.state = CrawlState.DISCOVERING
        url = start_url or self.config.listing_url
        self.logger.info("Fetching listing page: %s", url)
        try:
            html = await self._fetch_listing(url)
        except DiscoveryError as exc:
            self.logger.error("Seed discovery failed: %s", exc)
            return []
        seeds = extract_links(html, url, self.config.site_root, self.rules)
        self.logger.info("Found %d listing URLs", len(seeds))
        return seeds

    async def _fetch_listing(self, url: str) -> str:
        try:
            return await self._require_fetcher().fetch(require_url(url))
        except MalformedURLError as exc:
            raise DiscoveryError(f"unusable listing URL: {exc}") from exc
        except FetchError as exc:
            raise DiscoveryError(f"could not fetch listing page: {exc}") from exc

    async def _crawl_one(self, url: str, index: int) -> CrawlPage:
        self.logger.info("Crawling %d: %s", index, url)
        page = CrawlPage(url=url, index=index, content=await self._require_fetcher().fetch(url))
        if self.store.exists(page.filename):
            self.logger.debug("Overwriting existing %s", page.filename)
        self.store.save(page.filename, page.content)
        self.logger.info("Saved: %s", page.filename)
        return page

    def _log_header(self) -> None:
        cfg = self.config
        self.logger.info("=" * 60)
        self.logger.info("Base URL: %s", cfg.site_root)
        self.logger.info("Max pages: %d", cfg.max_pages)
        self.logger.info("Output dir: %s", cfg.output_dir)
        self.logger.info("Delay: %d ms, timeout: %d ms, retries: %d", cfg.delay_ms, cfg.http_timeout_ms, cfg.retries)
        if cfg.masked_proxy:
            self.logger.info("Proxy: %s", cfg.masked_proxy)
        self.logger.info("=" * 60)

    async def crawl(self) -> CrawlSummary:
        """Run discovery and the fetch loop; returns the run summary."""
        self._log_header()
        start = time.monotonic()

        seeds = await self.discover()
        if not seeds:
            self.state = CrawlState.ABORTED
            self.logger.warning("No listing URLs found, nothing to crawl")
            return CrawlSummary(
                state=self.state,
                output_dir=self.config.output_dir,
                reason=NO_URLS_DISCOVERED,
            )

        added = self.queue.add_many(seeds)
        self.logger.info("Added %d URLs to queue", added)
        budget = min(len(seeds), self.config.max_pages)
        summary = CrawlSummary(
            state=CrawlState.FETCHING,
            budget=budget,
            discovered=len(seeds),
            output_dir=self.config.output_dir,
        )
        self.state = CrawlState.FETCHING

        while summary.crawled < budget:
            url = self.queue.next()
            if url is None:
                self.logger.info("Queue exhausted before reaching the budget")
                break
            if self.queue.has_visited(url):
                self.logger.debug("Already visited, skipping %s", url)
                continue

            try:
                page = await self._crawl_one(url, summary.crawled + 1)
            except (FetchError, PersistError) as exc:
                summary.failed += 1
                self.logger.error("Failed to crawl %s: %s", url, exc)
                continue

            self.queue.mark_visited(url)
            summary.crawled += 1
            summary.saved.append(page.filename)

            if self.config.follow_links:
                found = self.queue.add_many(extract_links(page.content, url, self.config.site_root, self.rules))
                self.logger.debug("Queued %d new URLs from %s", found, url)

            if summary.crawled % PROGRESS_EVERY == 0 or summary.crawled == budget:
                self.logger.info("Progress: crawled %d/%d pages", summary.crawled, budget)

            if summary.crawled < budget:
                await self._sleep(self.config.delay_seconds)

        self.state = summary.state = CrawlState.COMPLETED
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl completed: %d/%d pages in %.2f s, %d failed, output: %s",
            summary.crawled, budget, duration, summary.failed, summary.output_dir,
        )
        return summary
