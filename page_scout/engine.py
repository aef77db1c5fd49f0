# File: page_scout/engine.py
"""page_scout.engine: entry point that runs one crawl for a validated configuration."""

from __future__ import annotations

from page_scout.config import CrawlerConfig
from page_scout.crawler.crawler import ListingCrawler
from page_scout.crawler.models import CrawlSummary
from page_scout.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(cfg: CrawlerConfig) -> CrawlSummary:
    """
    Run :class:`ListingCrawler` inside its context and return the summary.

    Parameters
    ----------
    cfg : CrawlerConfig
        Validated crawl configuration.
    """
    logger.info("Starting crawl of %s", cfg.site_root)
    async with ListingCrawler(cfg) as crawler:
        summary = await crawler.crawl()
    logger.info("Crawl finished: %s", summary.state.value)
    return summary

