"""page_scout.crawler: link discovery, URL queue, fetcher and crawl loop."""
from page_scout.crawler.crawler import ListingCrawler
from page_scout.crawler.link_extractor import ExtractionRules, extract_links
from page_scout.crawler.models import CrawlPage, CrawlState, CrawlSummary
from page_scout.crawler.queue import CrawlQueue
from page_scout.crawler.urls import normalize_url

__all__ = [
    "ListingCrawler",
    "ExtractionRules",
    "extract_links",
    "CrawlPage",
    "CrawlState",
    "CrawlSummary",
    "CrawlQueue",
    "normalize_url",
]
