# site_crawler/crawler/urls.py
"""
URL normalization and admission filters for SiteCrawler.

Canonical form is ``scheme://host[:port]/path``: scheme and host lowercased,
query and fragment dropped, path re-encoded so that equivalent spellings
(``/a%20b`` and ``/a b``) compare equal.
"""
from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import Tuple
from urllib.parse import quote, unquote, urljoin, urlsplit, urlunsplit

from site_crawler.errors import InvalidSeedURL, LinkResolutionError

__all__ = (
    "DEFAULT_MEDIA_EXTENSIONS",
    "STATIC_ASSET_EXTENSIONS",
    "normalize_url",
    "parse_seed",
    "DomainScope",
    "MediaFilter",
)

DEFAULT_MEDIA_EXTENSIONS: Tuple[str, ...] = (
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp",  # images
    ".svg", ".ico",  # icons
    ".mp4", ".webm", ".ogg", ".avi", ".mov", ".mkv",  # video
    ".mp3", ".wav", ".flac", ".aac",  # audio
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",  # documents
    ".zip", ".rar", ".tar", ".gz", ".7z",  # archives
    ".exe", ".bin", ".dmg", ".apk",  # binaries
)
STATIC_ASSET_EXTENSIONS: Tuple[str, ...] = (".css", ".js")

_SCHEMES = ("http", "https")
# RFC 3986 pchar minus "%", so a literal percent is always re-escaped
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def _canonical_path(path: str) -> str:
    # surrogateescape keeps non-UTF-8 escapes (%FF) stable across round trips
    decoded = unquote(path, errors="surrogateescape")
    return quote(decoded or "/", safe=_PATH_SAFE, errors="surrogateescape")


def _decode_href(href: str) -> str:
    try:
        return unquote(href, errors="strict")
    except UnicodeDecodeError:
        return href


def normalize_url(href: str, base: str) -> str:
    """
    Resolve *href* against *base* and return its canonical absolute form.

    Raises :class:`LinkResolutionError` for anything that does not resolve to
    an http(s) URL with a host.
    """
    candidate = _decode_href(href).strip()
    if not candidate:
        raise LinkResolutionError(f"empty href on {base}")
    try:
        parts = urlsplit(urljoin(base, candidate))
        parts.port  # validates the port component
    except ValueError as exc:
        raise LinkResolutionError(f"cannot resolve {href!r}: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in _SCHEMES:
        raise LinkResolutionError(f"unsupported scheme {scheme!r} in {href!r}")
    if not parts.hostname:
        raise LinkResolutionError(f"no host in {href!r}")
    return urlunsplit((scheme, parts.netloc.lower(), _canonical_path(parts.path), "", ""))


def parse_seed(raw: str) -> Tuple[str, str]:
    """Validate the seed URL and return ``(canonical_url, scope_domain)``."""
    seed = (raw or "").strip()
    try:
        parts = urlsplit(seed)
        parts.port
    except ValueError as exc:
        raise InvalidSeedURL(raw, str(exc)) from exc
    if not parts.scheme or not parts.netloc:
        raise InvalidSeedURL(raw, "scheme and host are required")
    if parts.scheme.lower() not in _SCHEMES:
        raise InvalidSeedURL(raw, f"unsupported scheme {parts.scheme!r}")
    try:
        canonical = normalize_url(seed, seed)
    except LinkResolutionError as exc:
        raise InvalidSeedURL(raw, str(exc)) from exc
    return canonical, urlsplit(canonical).netloc


class DomainScope:
    """Exact host[:port] match against the domain fixed at crawl start."""

    __slots__ = ("domain",)

    def __init__(self, domain: str) -> None:
        self.domain = domain.lower()

    def accepts(self, url: str) -> bool:
        return urlsplit(url).netloc == self.domain

    def __repr__(self) -> str:
        return f"DomainScope({self.domain!r})"


class MediaFilter:
    """Rejects URLs whose path extension is on the block-list."""

    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_MEDIA_EXTENSIONS,
        block_static_assets: bool = True,
    ) -> None:
        blocked = {e.lower() for e in extensions}
        if block_static_assets:
            blocked.update(STATIC_ASSET_EXTENSIONS)
        self.blocked = frozenset(blocked)

    def is_media(self, url: str) -> bool:
        path = unquote(urlsplit(url).path)
        return posixpath.splitext(path)[1].lower() in self.blocked

    def accepts(self, url: str) -> bool:
        return not self.is_media(url)
