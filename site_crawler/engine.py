# File: site_crawler/engine.py
"""site_crawler.engine: orchestration layer that runs one crawl session."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.cancellation import (
    CancellationToken,
    install_signal_handlers,
    remove_signal_handlers,
)
from site_crawler.crawler.crawler import AsyncCrawler
from site_crawler.crawler.models import CrawlResult
from site_crawler.logger import logger

__all__ = ["start_crawl", "run_crawl"]


async def start_crawl(
    seed: str,
    config: CrawlerConfig,
    *,
    on_discover: Optional[Callable[[str], None]] = None,
    token: Optional[CancellationToken] = None,
    install_signals: bool = True,
) -> CrawlResult:
    """
    Run the crawler for *seed* and return its summary.

    Parameters
    ----------
    seed : str
        Absolute http(s) URL; its host becomes the crawl scope.
    config : CrawlerConfig
        Worker count, frontier capacity, timeouts and filters.
    on_discover : callable, optional
        Called with every newly admitted canonical URL.
    token : CancellationToken, optional
        External stop signal; a fresh token is created when omitted.
    install_signals : bool
        Route SIGINT/SIGTERM to the token while the crawl runs.

    Raises
    ------
    InvalidSeedURL
        The seed is not an absolute http(s) URL; nothing is fetched.
    """
    token = token or CancellationToken()
    installed = install_signal_handlers(token) if install_signals else []
    try:
        async with AsyncCrawler(config, token=token, on_discover=on_discover) as crawler:
            result = await crawler.crawl(seed)
    finally:
        remove_signal_handlers(installed)
    if not result.balanced and not result.cancelled:
        logger.error(
            "Task counter unbalanced: %d increments, %d decrements",
            result.increments, result.decrements,
        )
    return result


def run_crawl(
    seed: str,
    config: CrawlerConfig,
    *,
    on_discover: Optional[Callable[[str], None]] = None,
) -> CrawlResult:
    """Blocking wrapper around :func:`start_crawl`."""
    return asyncio.run(start_crawl(seed, config, on_discover=on_discover))
