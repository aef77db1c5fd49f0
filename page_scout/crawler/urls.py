"""
URL normalization and site-membership helpers.

Normalization only resolves relative references and drops the fragment.
Query parameter order, trailing slashes and host case are left untouched,
so ``/cars?a=1&b=2`` and ``/cars?b=2&a=1`` stay distinct.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlsplit

from page_scout.errors import MalformedURLError

WEB_SCHEMES = ("http", "https")


def normalize_url(url: str, base_url: Optional[str] = None) -> Optional[str]:
    """
    Return *url* in absolute form without its fragment, or ``None`` when it is unusable.

    A URL that carries a scheme is taken as absolute; anything else is resolved
    against *base_url*. Never raises.
    """
    if not isinstance(url, str):
        return None
    candidate = url.strip()
    if not candidate:
        return None
    try:
        if not urlsplit(candidate).scheme:
            if not base_url:
                return None
            candidate = urljoin(base_url, candidate)
        absolute, _fragment = urldefrag(candidate)
        parts = urlsplit(absolute)
        # touching .port validates it
        _ = parts.port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if parts.scheme in WEB_SCHEMES and not parts.netloc:
        return None
    return absolute


def require_url(url: str, base_url: Optional[str] = None) -> str:
    """Like :func:`normalize_url` but raise :class:`MalformedURLError` instead of returning ``None``."""
    normalized = normalize_url(url, base_url)
    if normalized is None:
        raise MalformedURLError(f"Unusable URL: {url!r}")
    return normalized


def site_domain(base_url: str) -> str:
    """Host of *base_url*, lower-cased and without a leading ``www.``."""
    host = (urlsplit(base_url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def is_same_site(url: str, base_url: str) -> bool:
    """True when *url* is served by the site of *base_url* or one of its subdomains."""
    domain = site_domain(base_url)
    if not domain:
        return False
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return False
    return host == domain or host.endswith("." + domain)


__all__ = ["normalize_url", "require_url", "site_domain", "is_same_site", "WEB_SCHEMES"]
