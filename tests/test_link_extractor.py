"""Tests for the four discovery strategies and their union."""
from bs4 import BeautifulSoup

from page_scout.config import CrawlerConfig
from page_scout.crawler.link_extractor import (
    ExtractionRules,
    category_links,
    extract_links,
    listing_links,
    pagination_links,
    synthetic_pagination,
)

BASE = "https://www.carzone.ie"
HOME = BASE + "/"


def test_listing_links_need_listing_or_page_marker():
    html = """
      <a href="/cars/ford">ford</a>
      <a href="/search-results?page=2">p2</a>
      <a href="/about">about</a>
      <a href="https://other.com/cars">elsewhere</a>
      <a href="javascript:void('/cars')">js</a>
      <a href="/cars#reviews">same page</a>
    """
    assert listing_links(html, HOME, BASE) == [
        "https://www.carzone.ie/cars/ford",
        "https://www.carzone.ie/search-results?page=2",
        "https://www.carzone.ie/cars",
    ]


def test_category_links():
    html = """
      <a href="/used-cars/dublin">used</a>
      <a href="/new-cars">new</a>
      <a href="https://www.carzone.ie/search?make=bmw">search</a>
      <a href="https://facebook.com/search">fb</a>
      <a href="/contact">contact</a>
    """
    assert category_links(html, HOME, BASE) == [
        "https://www.carzone.ie/used-cars/dublin",
        "https://www.carzone.ie/new-cars",
        "https://www.carzone.ie/search?make=bmw",
    ]


def test_pagination_controls_by_text():
    html = """
      <nav>
        <a href="/listing?pg=2">2</a>
        <a href="/listing?pg=3">Next &raquo;</a>
        <a href="/help">Help</a>
      </nav>
      <div class="pagination"><a href="/listing?pg=9">Suivant</a></div>
      <a class="page-link" href="/listing?pg=4">Page 4</a>
      <a href="/listing?pg=5">5</a>
    """
    # document order; plain anchors outside navigation blocks are ignored
    assert pagination_links(html, HOME, BASE) == [
        "https://www.carzone.ie/listing?pg=2",
        "https://www.carzone.ie/listing?pg=3",
        "https://www.carzone.ie/listing?pg=9",
        "https://www.carzone.ie/listing?pg=4",
    ]


def test_pagination_respects_configured_synonyms():
    rules = ExtractionRules(next_words=("next", "page", "weiter"))
    html = '<nav><a href="/l?x=1">Weiter</a><a href="/l?x=2">Suivant</a></nav>'
    assert pagination_links(html, HOME, BASE, rules) == ["https://www.carzone.ie/l?x=1"]


def test_synthetic_pagination_from_page_parameter():
    urls = synthetic_pagination("https://www.carzone.ie/cars?page=3")
    assert urls == [f"https://www.carzone.ie/cars?page={n}" for n in range(4, 9)]


def test_synthetic_pagination_overwrites_the_found_parameter():
    urls = synthetic_pagination("https://www.carzone.ie/search?make=ford&p=7&sort=asc")
    assert urls[0] == "https://www.carzone.ie/search?make=ford&p=8&sort=asc"
    assert len(urls) == 5


def test_synthetic_pagination_for_listing_path_without_parameter():
    urls = synthetic_pagination("https://www.carzone.ie/cars")
    assert urls == [f"https://www.carzone.ie/cars?page={n}" for n in range(2, 11)]


def test_synthetic_pagination_gives_nothing_on_bad_input():
    assert synthetic_pagination("https://www.carzone.ie/about") == []
    assert synthetic_pagination("https://www.carzone.ie/cars?page=abc") == []
    assert synthetic_pagination("not a url") == []
    assert synthetic_pagination("http://[::1/cars") == []


def test_synthetic_pagination_skips_blank_page_parameter():
    urls = synthetic_pagination("https://www.carzone.ie/cars?page=&p=2")
    assert urls == [f"https://www.carzone.ie/cars?page=&p={n}" for n in range(3, 8)]
    urls = synthetic_pagination("https://www.carzone.ie/cars?page=&x=1")
    assert urls == [f"https://www.carzone.ie/cars?page={n}&x=1" for n in range(2, 11)]


def test_extract_links_unions_strategies_without_duplicates():
    html = """
      <a href="/cars?page=2">2</a>
      <a href="/used-cars">used</a>
      <ul class="pagination"><a href="/cars?page=2">2</a><a href="/cars?page=3">Next</a></ul>
    """
    links = extract_links(html, "https://www.carzone.ie/cars", BASE)
    assert len(links) == len(set(links))
    assert "https://www.carzone.ie/used-cars" in links
    assert set(f"https://www.carzone.ie/cars?page={n}" for n in range(2, 11)) <= set(links)


def test_extract_links_is_content_independent_for_synthetic_pages():
    a = extract_links("<p>nothing</p>", "https://www.carzone.ie/cars?page=3", BASE)
    b = extract_links("<<<>>", "https://www.carzone.ie/cars?page=3", BASE)
    assert a == b == [f"https://www.carzone.ie/cars?page={n}" for n in range(4, 9)]


def test_extract_links_tolerates_malformed_markup():
    html = '<a href="/cars/1"><div><a href=\'/cars/2\'<<</b></html><a href="http://[::1/cars">x</a>'
    links = extract_links(html, HOME, BASE)
    assert "https://www.carzone.ie/cars/1" in links
    assert extract_links("", HOME, BASE) == []


def test_strategies_accept_a_prepared_soup():
    soup = BeautifulSoup('<a href="/cars/9">x</a>', "html.parser")
    assert listing_links(soup, HOME, BASE) == ["https://www.carzone.ie/cars/9"]


def test_rules_from_config():
    cfg = CrawlerConfig(listing_path="/vans", page_params=("pg",), next_synonyms=("Weiter",))
    rules = ExtractionRules.from_config(cfg)
    assert rules.listing_markers == ("/vans", "pg=")
    assert rules.next_words == ("next", "page", "weiter")
    assert synthetic_pagination("https://www.carzone.ie/vans", rules)[0] == "https://www.carzone.ie/vans?pg=2"
