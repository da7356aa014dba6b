import time

import pytest

from espn_session.retry import RetryPolicy


def test_requires_a_bound():
    with pytest.raises(ValueError):
        RetryPolicy(interval=0.1)
    with pytest.raises(ValueError):
        RetryPolicy(attempts=0)


@pytest.mark.asyncio
async def test_stops_after_attempts():
    calls = []

    async def probe():
        calls.append(1)
        return None

    assert await RetryPolicy(attempts=3, interval=0).poll(probe) is None
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_returns_first_truthy_result():
    results = iter([None, "", "found", "later"])

    async def probe():
        return next(results)

    assert await RetryPolicy(attempts=5, interval=0).poll(probe) == "found"


@pytest.mark.asyncio
async def test_stops_after_max_elapsed():
    ticks = []

    async def probe():
        return None

    start = time.monotonic()
    result = await RetryPolicy(interval=0.01, max_elapsed=0.1).poll(
        probe, on_tick=lambda attempt, elapsed: ticks.append(attempt)
    )

    assert result is None
    assert time.monotonic() - start < 1
    assert ticks and ticks == sorted(ticks)
