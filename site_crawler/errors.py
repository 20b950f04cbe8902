# site_crawler/errors.py
"""
Exception hierarchy for the SiteCrawler package.

Only :class:`InvalidSeedURL` ever reaches the caller of a crawl; the rest are
raised and handled inside the worker pipeline.
"""
from __future__ import annotations

__all__ = (
    "CrawlerError",
    "InvalidSeedURL",
    "LinkResolutionError",
    "TransientFetchError",
    "ParseError",
    "FrontierFull",
    "FrontierClosed",
    "CrawlCancelled",
)


class CrawlerError(Exception):
    """Base class for every crawler error."""


class InvalidSeedURL(CrawlerError, ValueError):
    """Seed cannot be parsed, lacks scheme/host or is not http(s)."""

    def __init__(self, seed: str, reason: str) -> None:
        super().__init__(f"invalid seed URL {seed!r}: {reason}")
        self.seed = seed
        self.reason = reason


class LinkResolutionError(CrawlerError, ValueError):
    """A single href could not be resolved to a canonical URL."""


class TransientFetchError(CrawlerError):
    """Network failure, timeout or non-success status for one URL."""

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class ParseError(CrawlerError):
    """Fetched body could not be parsed as HTML."""


class FrontierFull(CrawlerError):
    """Non-blocking enqueue hit the frontier capacity."""


class FrontierClosed(CrawlerError):
    """Enqueue attempted after the frontier was closed."""


class CrawlCancelled(CrawlerError):
    """Cancellation token fired while awaiting a suspension point."""
