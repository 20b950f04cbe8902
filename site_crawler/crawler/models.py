# site_crawler/crawler/models.py
"""
Data models for the SiteCrawler crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(slots=True)
class FetchResult:
    """Successful HTTP response for one canonical URL."""

    url: str
    status: int
    body: bytes
    content_type: str = ""
    charset: Optional[str] = None

    @property
    def is_html(self) -> bool:
        """True for HTML types, and for responses that did not declare one."""
        return not self.content_type or self.content_type in HTML_CONTENT_TYPES


@dataclass(slots=True)
class PageResult:
    """Lowercased page text and raw hrefs; lives for one worker iteration."""

    url: str
    text: str
    links: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CrawlStats:
    processed: int = 0
    fetched: int = 0
    fetch_errors: int = 0
    parse_errors: int = 0
    skipped: int = 0
    discovered: int = 0
    rejected: int = 0


@dataclass(slots=True)
class CrawlResult:
    """Summary of a finished (or cancelled) crawl."""

    seed: str
    domain: str
    processed: int
    fetched: int
    fetch_errors: int
    parse_errors: int
    discovered: int
    reverted: int
    increments: int
    decrements: int
    cancelled: bool = False
    elapsed: float = 0.0
    skipped: int = 0

    @property
    def balanced(self) -> bool:
        return self.increments == self.decrements
