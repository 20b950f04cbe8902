# site_crawler/crawler/cancellation.py
"""
Cooperative cancellation shared by every worker of a crawl session.
"""
from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Iterable, Optional, TypeVar

from site_crawler.errors import CrawlCancelled

__all__ = ("CancellationToken", "install_signal_handlers", "remove_signal_handlers")

T = TypeVar("T")

logger = logging.getLogger("SiteCrawler.cancellation")


class CancellationToken:
    """One-shot stop flag that can be awaited or raced against other work."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    async def race(self, aw: Awaitable[T]) -> T:
        """
        Await *aw* unless the token fires first.

        On cancellation the pending awaitable is cancelled and
        :class:`CrawlCancelled` is raised. If both complete together the
        cancellation wins and the result of *aw* is discarded.
        """
        work = asyncio.ensure_future(aw)
        if self.cancelled:
            await _discard(work)
            raise CrawlCancelled(self.reason)
        stop = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, stop}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            stop.cancel()
            raise
        if stop.done():
            await _discard(work)
            raise CrawlCancelled(self.reason)
        stop.cancel()
        return work.result()


async def _discard(task: asyncio.Future) -> None:
    if not task.done():
        task.cancel()
    # collects the outcome so an abandoned failure is not reported as unretrieved
    await asyncio.gather(task, return_exceptions=True)


def install_signal_handlers(
    token: CancellationToken,
    signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
) -> list[signal.Signals]:
    """
    Route OS signals to *token* on the running loop.

    Returns the signals actually installed; platforms without
    ``add_signal_handler`` support (Windows) get none.
    """
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in signals:

        def _handler(sig: signal.Signals = sig) -> None:
            logger.warning("Received %s, stopping crawl", sig.name)
            token.cancel(sig.name)

        try:
            loop.add_signal_handler(sig, _handler)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal %s not supported on this loop", sig.name)
            continue
        installed.append(sig)
    return installed


def remove_signal_handlers(sigs: Iterable[signal.Signals]) -> None:
    loop = asyncio.get_running_loop()
    for sig in sigs:
        loop.remove_signal_handler(sig)
