# page_scout/crawler/fetcher.py
"""
Fetcher module: HTTP GET with proxy support, timeout and retry/backoff.
"""
from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, Optional, Sequence, Tuple
from urllib.parse import unquote, urlsplit, urlunsplit

from aiohttp import BasicAuth, ClientError, ClientSession, ClientTimeout, InvalidURL

from page_scout.config import CrawlerConfig, mask_proxy
from page_scout.errors import FetchError
from page_scout.logger import get_logger

log = get_logger("fetcher")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
MAX_BACKOFF = 60.0

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Upgrade-Insecure-Requests": "1",
}

SleepFn = Callable[[float], Awaitable[None]]


def proxy_settings(proxy_url: Optional[str]) -> Tuple[Optional[str], Optional[BasicAuth]]:
    """Split a proxy URL into the bare proxy address and its optional credentials."""
    if not proxy_url:
        return None, None
    parts = urlsplit(proxy_url)
    auth = None
    if parts.username is not None:
        auth = BasicAuth(unquote(parts.username), unquote(parts.password or ""))
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{parts.port}" if parts.port else host
    return urlunsplit((parts.scheme, netloc, parts.path, "", "")), auth


def create_session(config: CrawlerConfig) -> ClientSession:
    """Session shared by every request of one run."""
    headers = {"User-Agent": config.user_agent, **DEFAULT_HEADERS}
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout_seconds),
        headers=headers,
        raise_for_status=False,
    )


class Fetcher:
    """Fetches page bodies, retrying network errors, timeouts and 5xx with exponential backoff."""

    def __init__(
        self,
        session: ClientSession,
        config: CrawlerConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.session = session
        self.config = config
        self.retries = config.retries
        self._retry_status = retry_status
        self._sleep = sleep
        self._proxy, self._proxy_auth = proxy_settings(config.proxy_url)
        if self._proxy:
            log.info("Proxy configured: %s", mask_proxy(config.proxy_url or ""))
        else:
            log.debug("No proxy configured, using a direct connection")

    def backoff(self, attempt: int) -> float:
        """Delay before retry number *attempt* (1-based), with up to 20 % jitter."""
        base = (self.config.backoff_ms / 1000) * (2 ** attempt)
        return min(MAX_BACKOFF, base + random.uniform(0, base * 0.2))

    async def fetch(self, url: str) -> str:
        """
        Return the body of *url*.

        Raises :class:`FetchError` once the retries are exhausted or on a
        non-retryable HTTP status.
        """
        attempt = 0
        while True:
            status: Optional[int] = None
            try:
                async with self.session.get(url, proxy=self._proxy, proxy_auth=self._proxy_auth) as resp:
                    status = resp.status
                    if status in self._retry_status:
                        raise ClientError(f"retryable status {status}")
                    if status >= 400:
                        raise FetchError(url, resp.reason or "request failed", status=status)
                    return await resp.text(errors="replace")
            except InvalidURL as exc:
                raise FetchError(url, f"invalid URL: {exc}") from exc
            except (ClientError, asyncio.TimeoutError) as exc:
                reason = str(exc) or type(exc).__name__
                if attempt >= self.retries:
                    log.warning("Giving up on %s after %d attempt(s): %s", url, attempt + 1, reason)
                    raise FetchError(url, reason, status=status) from exc
                attempt += 1
                delay = self.backoff(attempt)
                log.warning("Retry attempt %d/%d for %s in %.2f s (%s)", attempt, self.retries, url, delay, reason)
                await self._sleep(delay)


__all__ = ["Fetcher", "create_session", "proxy_settings", "RETRY_STATUS"]
