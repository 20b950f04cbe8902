# site_crawler/crawler/frontier.py
"""
Frontier queue, dedup store and outstanding-task counter.

All three are plain asyncio objects shared by the workers of one crawl
session. None of the mutating calls used during admission awaits, so on a
single event loop ``DedupStore.add`` -> ``TaskCounter.increment`` ->
``Frontier.put_nowait`` (and the rollback on :class:`FrontierFull`) runs as
one uninterrupted step.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from typing import Deque, Optional, Set

from site_crawler.crawler.cancellation import CancellationToken
from site_crawler.errors import CrawlCancelled, FrontierClosed, FrontierFull

__all__ = (
    "Admission",
    "FullFrontierPolicy",
    "DedupStore",
    "Frontier",
    "TaskCounter",
    "Admitter",
)

logger = logging.getLogger("SiteCrawler.frontier")


class Admission(enum.Enum):
    ADMITTED = "admitted"
    DUPLICATE = "duplicate"
    REVERTED = "reverted"


class FullFrontierPolicy(str, enum.Enum):
    """What admission does when the frontier is at capacity."""

    REVERT = "revert"
    BLOCK = "block"


class DedupStore:
    """Set of every canonical URL currently admitted to the frontier."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def add(self, url: str) -> bool:
        """Check-and-insert. Returns False if *url* was already present."""
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def discard(self, url: str) -> None:
        self._seen.discard(url)

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._seen)


class Frontier:
    """Bounded FIFO of canonical URLs awaiting fetch."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("frontier capacity must be >= 1")
        self.capacity = capacity
        self._items: Deque[str] = deque()
        self._closed = False
        self._not_empty = asyncio.Event()
        self._not_full = asyncio.Event()
        self._not_full.set()

    def __len__(self) -> int:
        return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def full(self) -> bool:
        return len(self._items) >= self.capacity

    def put_nowait(self, url: str) -> None:
        if self._closed:
            raise FrontierClosed(url)
        if self.full():
            raise FrontierFull(url)
        self._items.append(url)
        self._not_empty.set()
        if self.full():
            self._not_full.clear()

    async def put(self, url: str) -> bool:
        """Wait for free space and enqueue. Returns False if closed meanwhile."""
        while True:
            if self._closed:
                return False
            if not self.full():
                self.put_nowait(url)
                return True
            self._not_full.clear()
            await self._not_full.wait()

    async def get(self) -> Optional[str]:
        """Next URL, or None once the frontier is closed and drained."""
        while True:
            if self._items:
                url = self._items.popleft()
                self._not_full.set()
                if not self._items:
                    self._not_empty.clear()
                return url
            if self._closed:
                return None
            self._not_empty.clear()
            await self._not_empty.wait()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # wake every waiter so it can observe the closed state
        self._not_empty.set()
        self._not_full.set()


class TaskCounter:
    """Pending plus in-flight work items; fires once when it drops to zero."""

    def __init__(self) -> None:
        self._value = 0
        self.increments = 0
        self.decrements = 0
        self._zero = asyncio.Event()

    @property
    def value(self) -> int:
        return self._value

    @property
    def balanced(self) -> bool:
        return self.increments == self.decrements

    def increment(self) -> None:
        if self._zero.is_set():
            raise RuntimeError("counter already reached zero; crawl is over")
        self._value += 1
        self.increments += 1

    def decrement(self) -> None:
        if self._value <= 0:
            raise RuntimeError("outstanding-task counter would go negative")
        self._value -= 1
        self.decrements += 1
        if self._value == 0:
            self._zero.set()

    async def wait_zero(self) -> None:
        await self._zero.wait()


class Admitter:
    """Joint dedup/enqueue admission with compensating rollback.

    Under the ``block`` policy at most *max_blocked* admissions wait for
    space at the same time. Any further candidate that meets a full frontier
    is reverted, so at least one worker keeps draining the frontier.
    """

    def __init__(
        self,
        seen: DedupStore,
        frontier: Frontier,
        counter: TaskCounter,
        policy: FullFrontierPolicy = FullFrontierPolicy.REVERT,
        token: Optional[CancellationToken] = None,
        max_blocked: int = 1,
    ) -> None:
        if max_blocked < 0:
            raise ValueError("max_blocked must be >= 0")
        self.seen = seen
        self.frontier = frontier
        self.counter = counter
        self.policy = FullFrontierPolicy(policy)
        self.token = token or CancellationToken()
        self.max_blocked = max_blocked
        self.blocked = 0
        self.reverted = 0

    def _rollback(self, url: str) -> Admission:
        self.seen.discard(url)
        self.counter.decrement()
        self.reverted += 1
        return Admission.REVERTED

    def try_admit(self, url: str) -> Admission:
        """Non-blocking admission, always using the revert policy."""
        if not self.seen.add(url):
            return Admission.DUPLICATE
        self.counter.increment()
        try:
            self.frontier.put_nowait(url)
        except (FrontierFull, FrontierClosed):
            logger.debug("Frontier rejected %s, reverting admission", url)
            return self._rollback(url)
        return Admission.ADMITTED

    async def admit(self, url: str) -> Admission:
        if self.policy is FullFrontierPolicy.REVERT:
            return self.try_admit(url)
        if not self.frontier.full() or self.blocked >= self.max_blocked:
            return self.try_admit(url)
        if not self.seen.add(url):
            return Admission.DUPLICATE
        self.counter.increment()
        self.blocked += 1
        try:
            queued = await self.token.race(self.frontier.put(url))
        except CrawlCancelled:
            queued = False
        finally:
            self.blocked -= 1
        if not queued:
            return self._rollback(url)
        return Admission.ADMITTED
