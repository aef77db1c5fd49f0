# page_scout/crawler/link_extractor.py
"""
Listing-URL discovery for PageScout.

Four independent strategies look for candidate URLs in one listing page:

1. listing links   – hrefs pointing at the listing path or carrying a page parameter;
2. category links  – hrefs pointing at search / category sections;
3. pagination      – anchors inside pagination or navigation blocks whose text
   looks like a page control ("2", "Next", "Page 3"…);
4. synthetic pagination – next page numbers built from the page URL itself.

:func:`extract_links` runs them all and returns the union, de-duplicated in
discovery order. Malformed markup never raises; the worst case is ``[]``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from page_scout.crawler.urls import WEB_SCHEMES, is_same_site, normalize_url
from page_scout.logger import get_logger

log = get_logger("extractor")

PAGINATION_SELECTOR = "a.pagination, a.page-link, nav a, .pagination a"
SYNTHETIC_LOOKAHEAD = 5
SYNTHETIC_FIRST_PAGE, SYNTHETIC_LAST_PAGE = 2, 10

_NUMERIC_RE = re.compile(r"\d+", re.ASCII)

Markup = Union[str, bytes, BeautifulSoup]


@dataclass(frozen=True)
class ExtractionRules:
    """Site-specific markers used by the strategies."""

    listing_path: str = "/cars"
    page_params: Tuple[str, ...] = ("page", "p")
    category_markers: Tuple[str, ...] = ("search", "/used-cars", "/new-cars")
    next_words: Tuple[str, ...] = ("next", "page", "suivant")

    @classmethod
    def from_config(cls, config) -> ExtractionRules:
        extra = tuple(w.lower() for w in config.next_synonyms if w)
        return cls(
            listing_path=config.listing_path,
            page_params=tuple(config.page_params),
            category_markers=tuple(config.category_markers),
            next_words=tuple(dict.fromkeys(("next", "page") + extra)),
        )

    @property
    def page_markers(self) -> Tuple[str, ...]:
        return tuple(f"{name}=" for name in self.page_params)

    @property
    def listing_markers(self) -> Tuple[str, ...]:
        return (self.listing_path,) + self.page_markers


DEFAULT_RULES = ExtractionRules()


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #


def _soup(markup: Markup) -> Optional[BeautifulSoup]:
    if isinstance(markup, BeautifulSoup):
        return markup
    try:
        return BeautifulSoup(markup or "", "html.parser")
    except (ParserRejectedMarkup, TypeError) as exc:
        log.debug("Unparseable markup skipped: %s", exc)
        return None


def _href(tag: object) -> Optional[str]:
    if not isinstance(tag, Tag):
        return None
    value = tag.get("href")
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _anchors(soup: BeautifulSoup) -> Iterable[Tuple[Tag, str]]:
    for tag in soup.find_all("a", href=True):
        href = _href(tag)
        if href is not None:
            yield tag, href


def _accept(href: str, page_url: str, base_url: str) -> Optional[str]:
    """Normalize *href* and apply the shared acceptance predicate."""
    normalized = normalize_url(href, page_url)
    if not normalized:
        return None
    if "#" in normalized or normalized.lower().startswith("javascript:"):
        return None
    if urlsplit(normalized).scheme not in WEB_SCHEMES:
        return None
    if not is_same_site(normalized, base_url):
        return None
    return normalized


def _unique(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(urls))


# --------------------------------------------------------------------------- #
# Strategies                                                                  #
# --------------------------------------------------------------------------- #


def listing_links(markup: Markup, page_url: str, base_url: str, rules: ExtractionRules = DEFAULT_RULES) -> List[str]:
    """Strategy 1: explicit links to the listing path or to a numbered page."""
    soup = _soup(markup)
    if soup is None:
        return []
    markers = rules.listing_markers
    found: List[str] = []
    for _tag, href in _anchors(soup):
        if not any(m in href for m in markers):
            continue
        normalized = _accept(href, page_url, base_url)
        if normalized and any(m in normalized for m in markers):
            found.append(normalized)
    return _unique(found)


def category_links(markup: Markup, page_url: str, base_url: str, rules: ExtractionRules = DEFAULT_RULES) -> List[str]:
    """Strategy 2: search and category sections."""
    soup = _soup(markup)
    if soup is None:
        return []
    found: List[str] = []
    for _tag, href in _anchors(soup):
        if not any(m in href for m in rules.category_markers):
            continue
        normalized = _accept(href, page_url, base_url)
        if normalized:
            found.append(normalized)
    return _unique(found)


def _looks_like_page_control(text: str, words: Sequence[str]) -> bool:
    if _NUMERIC_RE.fullmatch(text):
        return True
    lowered = text.lower()
    return any(word in lowered for word in words)


def pagination_links(markup: Markup, page_url: str, base_url: str, rules: ExtractionRules = DEFAULT_RULES) -> List[str]:
    """Strategy 3: page controls inside pagination / navigation blocks."""
    soup = _soup(markup)
    if soup is None:
        return []
    found: List[str] = []
    for tag in soup.select(PAGINATION_SELECTOR):
        href = _href(tag)
        if href is None:
            continue
        if not _looks_like_page_control(tag.get_text(" ", strip=True), rules.next_words):
            continue
        normalized = _accept(href, page_url, base_url)
        if normalized:
            found.append(normalized)
    return _unique(found)


def _with_page(parts, query: List[Tuple[str, str]], name: str, number: int) -> str:
    """Rebuild *parts* with ``name=number``, replacing the first occurrence in place."""
    rebuilt: List[Tuple[str, str]] = []
    placed = False
    for key, value in query:
        if key == name:
            if not placed:
                rebuilt.append((key, str(number)))
                placed = True
            continue
        rebuilt.append((key, value))
    if not placed:
        rebuilt.append((name, str(number)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(rebuilt), ""))


def synthetic_pagination(page_url: str, rules: ExtractionRules = DEFAULT_RULES) -> List[str]:
    """
    Strategy 4: guess the following pages from *page_url* alone.

    ``…?page=3`` yields pages 4–8. A listing URL without a page parameter
    yields pages 2–10. Results bypass the acceptance predicate; any failure
    to build them yields ``[]``.
    """
    try:
        parts = urlsplit(page_url)
        if not parts.scheme or not parts.netloc:
            return []
        query = parse_qsl(parts.query, keep_blank_values=True)
        # blank values count as absent: ?page=&p=2 is page 2
        values: dict[str, str] = {}
        for key, value in query:
            if value.strip():
                values.setdefault(key, value)
        name = next((p for p in rules.page_params if p in values), None)
        if name is not None:
            current = int(values[name])
            numbers = range(current + 1, current + 1 + SYNTHETIC_LOOKAHEAD)
        elif rules.listing_path in parts.path:
            name = rules.page_params[0]
            numbers = range(SYNTHETIC_FIRST_PAGE, SYNTHETIC_LAST_PAGE + 1)
        else:
            return []
        return [_with_page(parts, query, name, n) for n in numbers]
    except (ValueError, IndexError) as exc:
        log.debug("No synthetic pagination for %s: %s", page_url, exc)
        return []


# --------------------------------------------------------------------------- #
# Public entry point                                                          #
# --------------------------------------------------------------------------- #


def extract_links(
    html: Markup,
    page_url: str,
    base_url: str,
    rules: ExtractionRules = DEFAULT_RULES,
) -> List[str]:
    """
    Run all strategies over one document and return the union.

    Relative hrefs are resolved against *page_url*; site membership is
    checked against *base_url*.
    """
    soup = _soup(html)
    found: List[str] = []
    if soup is not None:
        found += listing_links(soup, page_url, base_url, rules)
        found += category_links(soup, page_url, base_url, rules)
        found += pagination_links(soup, page_url, base_url, rules)
    found += synthetic_pagination(page_url, rules)
    links = _unique(found)
    log.debug("Extracted %d candidate URLs from %s", len(links), page_url)
    return links


__all__ = [
    "ExtractionRules",
    "DEFAULT_RULES",
    "extract_links",
    "listing_links",
    "category_links",
    "pagination_links",
    "synthetic_pagination",
]
