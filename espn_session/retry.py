import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded polling: stop after `attempts` probes or `max_elapsed` seconds.

    At least one bound is required. The probe is called once per attempt and
    polling stops at the first truthy result, which is returned. `None` is
    returned when the bound is reached.
    """

    attempts: int | None = None
    interval: float = 1.0
    max_elapsed: float | None = None

    def __post_init__(self):
        if self.attempts is None and self.max_elapsed is None:
            raise ValueError("RetryPolicy needs attempts or max_elapsed")
        if self.attempts is not None and self.attempts < 1:
            raise ValueError("attempts must be >= 1")

    async def poll(
        self,
        probe: Callable[[], Awaitable[T | None]],
        on_tick: Callable[[int, float], None] | None = None,
    ) -> T | None:
        start = time.monotonic()
        attempt = 0
        while True:
            attempt += 1
            result = await probe()
            if result:
                return result

            elapsed = time.monotonic() - start
            if on_tick:
                on_tick(attempt, elapsed)
            if self.attempts is not None and attempt >= self.attempts:
                return None
            if self.max_elapsed is not None and elapsed >= self.max_elapsed:
                return None

            wait = self.interval
            if self.max_elapsed is not None:
                wait = min(wait, max(self.max_elapsed - elapsed, 0))
            await asyncio.sleep(wait)
