# site_crawler/crawler/fetcher.py
"""
Fetcher module: one timed HTTP GET per canonical URL, no retries.
"""
from __future__ import annotations

import asyncio
from typing import Dict

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import FetchResult
from site_crawler.errors import TransientFetchError

_ACCEPT = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"


def request_headers(config: CrawlerConfig) -> Dict[str, str]:
    """Fixed header set sent with every request of a crawl."""
    return {"User-Agent": config.user_agent, "Accept": _ACCEPT}


def open_session(config: CrawlerConfig) -> ClientSession:
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers=request_headers(config),
        raise_for_status=False,
    )


class Fetcher:
    """Performs GET requests on a shared session."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return the body of a 200 response.

        Any transport error, timeout or other status raises
        :class:`TransientFetchError`; the caller treats it as terminal.
        """
        try:
            async with self.session.get(url) as resp:
                if resp.status != 200:
                    raise TransientFetchError(url, f"HTTP {resp.status}", status=resp.status)
                body = await resp.read()
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                return FetchResult(url, resp.status, body, ctype, resp.charset)
        except asyncio.TimeoutError as exc:
            raise TransientFetchError(url, f"timed out after {self.config.timeout}s") from exc
        except ClientError as exc:
            raise TransientFetchError(url, f"{type(exc).__name__}: {exc}") from exc
