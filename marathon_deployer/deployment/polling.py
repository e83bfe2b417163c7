"""
Bounded polling with an injectable clock.

The guard and the convergence watcher both wait by re-reading Marathon on a
fixed interval until a predicate holds or a deadline passes. Tests swap the
clock for one whose sleep advances time instantly.
"""

import asyncio
import time
from typing import Awaitable, Callable, Protocol


class Clock(Protocol):
    """Source of elapsed time and of waiting."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling coroutine."""
        ...


class MonotonicClock:
    """Real clock backed by time.monotonic and asyncio.sleep."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


async def poll_until(
    check: Callable[[], Awaitable[bool]],
    timeout: float,
    interval: float,
    clock: Clock,
    initial_delay: float = 0.0,
) -> bool:
    """
    Evaluate check until it returns True or timeout seconds have elapsed.

    The check always runs at least once, after initial_delay. The last check
    happens at the deadline at the latest. Exceptions raised by check abort the
    loop and propagate unchanged.

    Args:
        check: Coroutine function returning True when the wait is over
        timeout: Seconds from the call until giving up (initial_delay included)
        interval: Seconds between checks
        clock: Clock used for both measuring and waiting
        initial_delay: Seconds to wait before the first check

    Returns:
        True if check succeeded, False on timeout
    """
    start = clock.now()
    if initial_delay > 0:
        await clock.sleep(initial_delay)

    while True:
        if await check():
            return True

        remaining = timeout - (clock.now() - start)
        if remaining <= 0:
            return False
        await clock.sleep(min(interval, remaining))
