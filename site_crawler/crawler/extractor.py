# site_crawler/crawler/extractor.py
"""
Page text and link extraction for SiteCrawler.
"""
from __future__ import annotations

from typing import List, Optional, Union

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from site_crawler.crawler.models import PageResult
from site_crawler.errors import ParseError

__all__ = ("NON_CONTENT_TAGS", "extract_page")

NON_CONTENT_TAGS = (
    "script", "style", "noscript", "head", "link", "meta", "title",
    "iframe", "svg", "canvas", "img", "video", "audio",
    "map", "area", "object", "embed", "source", "track",
    "template", "picture", "param",
)


def extract_page(url: str, body: Union[str, bytes], encoding: Optional[str] = None) -> PageResult:
    """
    Parse *body* as HTML and return its visible text and raw ``<a href>`` values.

    Anchors inside dropped non-content elements (``<noscript>``,
    ``<template>``, ...) are ignored. Raises :class:`ParseError`
    when the markup is rejected by the parser.
    """
    try:
        if isinstance(body, bytes):
            soup = BeautifulSoup(body, "html.parser", from_encoding=encoding)
        else:
            soup = BeautifulSoup(body, "html.parser")
    except (ParserRejectedMarkup, LookupError) as exc:
        raise ParseError(f"{url}: {exc}") from exc

    for element in soup(list(NON_CONTENT_TAGS)):
        element.decompose()

    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, str):
            links.append(href)
    text = " ".join(soup.stripped_strings).lower()
    return PageResult(url=url, text=text, links=links)
