# === FILE: site_crawler/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from aiohttp import ClientSession

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.cancellation import CancellationToken
from site_crawler.crawler.extractor import extract_page
from site_crawler.crawler.fetcher import Fetcher, open_session
from site_crawler.crawler.frontier import Admission, Admitter, DedupStore, Frontier, TaskCounter
from site_crawler.crawler.models import CrawlResult, CrawlStats
from site_crawler.crawler.urls import DomainScope, MediaFilter, normalize_url, parse_seed
from site_crawler.errors import CrawlCancelled, LinkResolutionError, ParseError, TransientFetchError

__all__ = ("AsyncCrawler", "CrawlSession")

DiscoverCallback = Callable[[str], None]


class CrawlSession:
    """All mutable state of one crawl: scope, dedup store, frontier, counter."""

    def __init__(self, seed: str, config: CrawlerConfig, token: CancellationToken) -> None:
        self.seed, domain = parse_seed(seed)
        self.scope = DomainScope(domain)
        self.media = MediaFilter(config.media_extensions, config.block_static_assets)
        self.seen = DedupStore()
        self.frontier = Frontier(config.frontier_capacity)
        self.counter = TaskCounter()
        self.token = token
        self.admitter = Admitter(
            self.seen,
            self.frontier,
            self.counter,
            config.full_frontier_policy,
            token,
            max_blocked=config.workers - 1,
        )
        self.stats = CrawlStats()

    @property
    def domain(self) -> str:
        return self.scope.domain

    def accepts(self, url: str) -> bool:
        return self.scope.accepts(url) and self.media.accepts(url)


class AsyncCrawler:
    """Same-host crawler: fixed worker pool over a bounded frontier."""

    def __init__(
        self,
        config: CrawlerConfig,
        token: Optional[CancellationToken] = None,
        on_discover: Optional[DiscoverCallback] = None,
    ) -> None:
        self.config = config
        self.token = token or CancellationToken()
        self.on_discover = on_discover
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self.logger = logging.getLogger("SiteCrawler")

    async def __aenter__(self) -> AsyncCrawler:
        self.session = open_session(self.config)
        self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, seed: str) -> CrawlResult:
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        state = CrawlSession(seed, self.config, self.token)
        self.logger.info(
            "Starting crawl: %s (domain %s, %d workers, frontier %d)",
            state.seed, state.domain, self.config.workers, self.config.frontier_capacity,
        )
        start = time.monotonic()
        if state.admitter.try_admit(state.seed) is Admission.ADMITTED:
            self._discovered(state, state.seed)

        closer = asyncio.create_task(self._close_when_done(state))
        workers: List[asyncio.Task] = [
            asyncio.create_task(self._worker(state, i)) for i in range(self.config.workers)
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for w in workers:
                w.cancel()
            closer.cancel()
            await asyncio.gather(*workers, closer, return_exceptions=True)
            state.frontier.close()

        elapsed = time.monotonic() - start
        result = CrawlResult(
            seed=state.seed,
            domain=state.domain,
            processed=state.stats.processed,
            fetched=state.stats.fetched,
            fetch_errors=state.stats.fetch_errors,
            parse_errors=state.stats.parse_errors,
            discovered=state.stats.discovered,
            reverted=state.admitter.reverted,
            increments=state.counter.increments,
            decrements=state.counter.decrements,
            cancelled=self.token.cancelled,
            elapsed=elapsed,
            skipped=state.stats.skipped,
        )
        if result.cancelled:
            self.logger.warning(
                "Crawl cancelled (%s): %d URLs processed, %d still queued",
                self.token.reason, result.processed, len(state.frontier),
            )
        else:
            self.logger.info(
                "Finished: %d URLs processed in %.2f s (%.2f URL/s)",
                result.processed, elapsed, result.processed / elapsed if elapsed else 0,
            )
        return result

    async def _close_when_done(self, state: CrawlSession) -> None:
        await state.counter.wait_zero()
        self.logger.debug("No outstanding work, closing frontier")
        state.frontier.close()

    async def _worker(self, state: CrawlSession, index: int) -> None:
        while True:
            try:
                url = await state.token.race(state.frontier.get())
            except CrawlCancelled:
                self.logger.debug("Worker %d stopping on cancellation", index)
                return
            if url is None:
                return
            try:
                await self._process(state, url)
            finally:
                state.stats.processed += 1
                state.counter.decrement()

    async def _process(self, state: CrawlSession, url: str) -> None:
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        self.logger.info("Visiting: %s", url)
        try:
            if self.config.abort_inflight_fetches:
                response = await state.token.race(self.fetcher.fetch(url))
            else:
                response = await self.fetcher.fetch(url)
        except TransientFetchError as exc:
            state.stats.fetch_errors += 1
            self.logger.debug("Fetch failed %s", exc)
            return
        except CrawlCancelled:
            self.logger.debug("Aborted in-flight fetch of %s", url)
            return
        state.stats.fetched += 1

        if not response.is_html:
            state.stats.skipped += 1
            self.logger.debug("Skipping %s content at %s", response.content_type, url)
            return

        try:
            page = extract_page(url, response.body, response.charset)
        except ParseError as exc:
            state.stats.parse_errors += 1
            self.logger.debug("Parse failed %s", exc)
            return

        self.logger.debug("Extracted %d chars and %d links from %s", len(page.text), len(page.links), url)
        for href in page.links:
            if state.token.cancelled:
                return
            try:
                candidate = normalize_url(href, url)
            except LinkResolutionError as exc:
                self.logger.debug("Skipping link: %s", exc)
                continue
            if not state.accepts(candidate):
                state.stats.rejected += 1
                continue
            outcome = await state.admitter.admit(candidate)
            if outcome is Admission.ADMITTED:
                self._discovered(state, candidate)

    def _discovered(self, state: CrawlSession, url: str) -> None:
        state.stats.discovered += 1
        if self.on_discover is not None:
            self.on_discover(url)
