# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from typing import Awaitable, Callable, Dict, Union

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from site_crawler.config import CrawlerConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[str, Handler]


class Site:
    """Test web site: serves HTML strings or handlers and counts hits per path."""

    def __init__(self) -> None:
        self.hits: Counter[str] = Counter()
        self.release = asyncio.Event()
        self._server: TestServer | None = None

    @property
    def base(self) -> str:
        assert self._server is not None
        return f"http://{self._server.host}:{self._server.port}"

    def url(self, path: str) -> str:
        return f"{self.base}{path}"

    async def start(self, routes: Dict[str, Route]) -> Site:
        app = web.Application()

        @web.middleware
        async def count_hits(request: web.Request, handler: Handler) -> web.StreamResponse:
            self.hits[request.path] += 1
            return await handler(request)

        app.middlewares.append(count_hits)
        for path, route in routes.items():
            app.router.add_get(path, self._as_handler(route))
        self._server = TestServer(app)
        await self._server.start_server()
        return self

    async def stall(self, seconds: float = 5.0) -> None:
        """Keep a handler busy until the test releases it (or *seconds* pass)."""
        try:
            await asyncio.wait_for(self.release.wait(), seconds)
        except asyncio.TimeoutError:
            pass

    async def close(self) -> None:
        self.release.set()
        if self._server is not None:
            await self._server.close()

    @staticmethod
    def _as_handler(route: Route) -> Handler:
        if callable(route):
            return route

        async def handler(_: web.Request) -> web.Response:
            return web.Response(text=route, content_type="text/html")

        return handler


@pytest_asyncio.fixture
async def site():
    """Factory fixture: ``await site({...routes})`` starts a server."""
    sites: list[Site] = []

    async def _start(routes: Dict[str, Route]) -> Site:
        s = await Site().start(routes)
        sites.append(s)
        return s

    yield _start
    for s in sites:
        await s.close()


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Small, quick crawler configuration for live tests."""
    return CrawlerConfig(workers=4, frontier_capacity=100, timeout=2.0, user_agent="TestAgent/1.0")


def links(*hrefs: str) -> str:
    return "<html><body>" + "".join(f'<a href="{h}">{h}</a>' for h in hrefs) + "</body></html>"


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
