# File: tests/test_cancellation.py
import asyncio
import os
import signal

import pytest

from site_crawler.crawler.cancellation import (
    CancellationToken,
    install_signal_handlers,
    remove_signal_handlers,
)
from site_crawler.errors import CrawlCancelled


@pytest.mark.asyncio()
async def test_race_returns_result_when_not_cancelled():
    token = CancellationToken()

    async def work():
        await asyncio.sleep(0)
        return 42

    assert await token.race(work()) == 42
    assert not token.cancelled


@pytest.mark.asyncio()
async def test_race_cancels_pending_work():
    token = CancellationToken()
    finished = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        finally:
            finished.set()

    asyncio.get_running_loop().call_later(0.01, token.cancel, "stop")
    with pytest.raises(CrawlCancelled):
        await asyncio.wait_for(token.race(slow()), 1)
    assert finished.is_set()
    assert token.reason == "stop"


@pytest.mark.asyncio()
async def test_race_on_already_cancelled_token():
    token = CancellationToken()
    token.cancel()
    token.cancel("second call is ignored")
    with pytest.raises(CrawlCancelled):
        await token.race(asyncio.sleep(10))
    assert token.reason == "cancelled"


@pytest.mark.asyncio()
async def test_race_propagates_work_errors():
    token = CancellationToken()

    async def boom():
        raise KeyError("x")

    with pytest.raises(KeyError):
        await token.race(boom())


@pytest.mark.asyncio()
@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="POSIX signals only")
async def test_signal_handler_cancels_token():
    token = CancellationToken()
    installed = install_signal_handlers(token, (signal.SIGUSR1,))
    try:
        assert installed == [signal.SIGUSR1]
        os.kill(os.getpid(), signal.SIGUSR1)
        await asyncio.wait_for(token.wait(), 1)
    finally:
        remove_signal_handlers(installed)
    assert token.cancelled
    assert token.reason == "SIGUSR1"
