"""Async rate limiting used by the pacing controllers.

Provides smooth and bursty limiting in the style of Guava's RateLimiter.
Every acquisition suspends the caller at least once so that work units and
timer callbacks scheduled on the same event loop get a chance to run.
"""

import time
import asyncio
from typing import Callable, Optional
from enum import Enum


class RateLimiterType(Enum):
    """Rate limiter types."""
    SMOOTH = "smooth"  # Evenly spaced submissions (default)
    BURSTY = "bursty"  # Allow bursts up to max_burst_seconds worth of permits


class AsyncRateLimiter:
    """Async rate limiter handing out submission slots at a target rate."""

    def __init__(
        self,
        permits_per_second: float,
        limiter_type: RateLimiterType = RateLimiterType.SMOOTH,
        max_burst_seconds: float = 1.0,
        clock: Optional[Callable[[], float]] = None
    ):
        """Initialize rate limiter.

        Args:
            permits_per_second: Target rate in permits per second
            limiter_type: Type of rate limiting (smooth or bursty)
            max_burst_seconds: Maximum burst duration in seconds (for bursty type)
            clock: Seconds clock, defaults to time.monotonic
        """
        if permits_per_second <= 0:
            raise ValueError("permits_per_second must be positive")

        self.limiter_type = limiter_type
        self.max_burst_seconds = max_burst_seconds
        self._clock = clock if clock is not None else time.monotonic

        self._set_rate(permits_per_second)
        self._next_free = self._clock()

        if limiter_type == RateLimiterType.BURSTY:
            self._stored_permits = float(self._max_permits)
        else:
            self._stored_permits = 0.0

    def _set_rate(self, permits_per_second: float) -> None:
        self.permits_per_second = permits_per_second
        self._interval = 1.0 / permits_per_second
        if self.limiter_type == RateLimiterType.BURSTY:
            self._max_permits = int(permits_per_second * self.max_burst_seconds)
        else:
            self._max_permits = 0

    async def acquire(self, permits: int = 1) -> float:
        """Acquire permits and wait if necessary.

        Returns:
            Time waited in seconds
        """
        if permits <= 0:
            raise ValueError("permits must be positive")

        wait = self.reserve(permits)
        # Always yield, even when no wait is due
        await asyncio.sleep(wait)
        return wait

    def reserve(self, permits: int = 1) -> float:
        """Reserve permits and return how long the caller must wait."""
        now = self._clock()
        if self.limiter_type == RateLimiterType.BURSTY:
            return self._reserve_bursty(permits, now)
        return self._reserve_smooth(permits, now)

    def _reserve_smooth(self, permits: int, now: float) -> float:
        wait = max(0.0, self._next_free - now)
        self._next_free = max(now, self._next_free) + self._interval * permits
        return wait

    def _reserve_bursty(self, permits: int, now: float) -> float:
        # Resync stored permits based on elapsed time
        if now > self._next_free:
            new_permits = (now - self._next_free) * self.permits_per_second
            self._stored_permits = min(self._max_permits, self._stored_permits + new_permits)
            self._next_free = now

        from_stored = min(permits, int(self._stored_permits))
        self._stored_permits -= from_stored

        wait = max(0.0, self._next_free - now)
        self._next_free += (permits - from_stored) * self._interval
        return wait

    def set_rate(self, new_permits_per_second: float) -> None:
        """Update the rate dynamically, keeping the stored burst ratio."""
        if new_permits_per_second <= 0:
            raise ValueError("permits_per_second must be positive")

        old_max_permits = self._max_permits
        self._set_rate(new_permits_per_second)
        if self.limiter_type == RateLimiterType.BURSTY and old_max_permits > 0:
            ratio = self._stored_permits / old_max_permits
            self._stored_permits = ratio * self._max_permits

    def get_rate(self) -> float:
        return self.permits_per_second


class NoOpRateLimiter:
    """Rate limiter for unlimited rate; still yields to the event loop."""

    async def acquire(self, permits: int = 1) -> float:
        await asyncio.sleep(0)
        return 0.0

    def set_rate(self, new_permits_per_second: float) -> None:
        pass

    def get_rate(self) -> float:
        return float('inf')


def create_rate_limiter(
    permits_per_second: Optional[float],
    limiter_type: RateLimiterType = RateLimiterType.SMOOTH,
    clock: Optional[Callable[[], float]] = None
):
    """Factory function to create appropriate rate limiter.

    Args:
        permits_per_second: Target rate, None or 0 for unlimited
        limiter_type: Type of rate limiting
        clock: Optional seconds clock

    Returns:
        Rate limiter instance
    """
    if permits_per_second is None or permits_per_second <= 0:
        return NoOpRateLimiter()

    return AsyncRateLimiter(permits_per_second, limiter_type, clock=clock)
