"""Bundled rate controllers."""

import time
from typing import Any, Callable, Dict, Optional, Sequence

from ..core.errors import ConfigurationError
from ..utils.rate_limiter import RateLimiterType, create_rate_limiter
from .base import RateController


def _positive(opts: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    value = opts.get(key, default)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"rate control option '{key}' must be a number, got {value!r}") from None
    if value <= 0:
        raise ConfigurationError(f"rate control option '{key}' must be positive, got {value}")
    return value


class NoRateController(RateController):
    """Submits as fast as the event loop allows."""

    def __init__(self, opts: Dict[str, Any]):
        super().__init__(opts)
        self.limiter = create_rate_limiter(None)

    async def apply_pacing(self, start_time: float, submitted: int, results: Sequence[Any]) -> None:
        await self.limiter.acquire()


class FixedRateController(RateController):
    """Submits at a constant rate of ``opts.tps`` work units per second.

    With ``opts.bursty`` up to one second worth of submissions may be sent
    back to back after an idle period.
    """

    def __init__(self, opts: Dict[str, Any], clock: Optional[Callable[[], float]] = None):
        super().__init__(opts)
        self.tps = _positive(opts, 'tps')
        limiter_type = RateLimiterType.BURSTY if opts.get('bursty') else RateLimiterType.SMOOTH
        self._limiter_type = limiter_type
        self._clock = clock
        self.limiter = None

    def init(self, run_config: Dict[str, Any]) -> None:
        self.limiter = create_rate_limiter(self.tps, self._limiter_type, clock=self._clock)
        self.logger.info(f"Fixed rate control at {self.tps:.1f} tps ({self._limiter_type.value})")

    async def apply_pacing(self, start_time: float, submitted: int, results: Sequence[Any]) -> None:
        await self.limiter.acquire()


class LinearRateController(RateController):
    """Ramps the rate from ``opts.startingTps`` to ``opts.finishingTps``.

    Progress is measured in submitted work units for fixed-number runs and
    in elapsed seconds for duration runs.
    """

    def __init__(self, opts: Dict[str, Any], clock: Optional[Callable[[], float]] = None):
        super().__init__(opts)
        self.starting_tps = _positive(opts, 'startingTps')
        self.finishing_tps = _positive(opts, 'finishingTps')
        self._clock = clock
        self._wall_clock = time.time
        self.count = None
        self.duration = None
        self.limiter = None

    def init(self, run_config: Dict[str, Any]) -> None:
        self.count = run_config.get('count')
        self.duration = run_config.get('duration_seconds')
        self.limiter = create_rate_limiter(self.starting_tps, clock=self._clock)
        self.logger.info(f"Linear rate control from {self.starting_tps:.1f} to {self.finishing_tps:.1f} tps")

    def current_rate(self, start_time: float, submitted: int) -> float:
        if self.duration:
            progress = (self._wall_clock() - start_time) / self.duration
        elif self.count:
            progress = submitted / self.count
        else:
            progress = 1.0
        progress = min(1.0, max(0.0, progress))
        return self.starting_tps + (self.finishing_tps - self.starting_tps) * progress

    async def apply_pacing(self, start_time: float, submitted: int, results: Sequence[Any]) -> None:
        self.limiter.set_rate(self.current_rate(start_time, submitted))
        await self.limiter.acquire()
