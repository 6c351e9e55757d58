"""Token-bucket rate limiter with a bucket of one token."""

from __future__ import annotations

import asyncio
import time


class RateLimiter:
    """
    Enforces a minimum spacing between acquisitions.

    The bucket holds a single token, refilled every ``interval`` seconds,
    so the first caller goes through immediately and each later caller
    waits for its own slot. Waiters are served in arrival order.
    """

    def __init__(self, interval: float):
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        self.interval = interval
        self._lock = asyncio.Lock()
        self._next_slot = 0.0

    async def acquire(self) -> None:
        """Wait until a request may be sent."""
        async with self._lock:
            now = time.monotonic()
            if self._next_slot > now:
                await asyncio.sleep(self._next_slot - now)
                now = self._next_slot
            self._next_slot = now + self.interval
