"""In-memory target system with simulated latency and failures."""

import asyncio
import itertools
import random
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..core.config import TargetConfig
from ..core.results import TxResult
from .base import DefaultStatsTarget, ExecutionContext, TargetUtils


@dataclass
class SimulatedContext(ExecutionContext):
    """Execution context handed to workloads running against SimulatedTarget."""
    target: Optional["SimulatedTarget"] = None
    label: str = "default"
    submitted: int = 0

    async def submit(self, payload: Any = None) -> TxResult:
        return await self.target.submit(self, payload)

    async def submit_batch(self, payloads: Sequence[Any]) -> List[TxResult]:
        return await self.target.submit_batch(self, payloads)


class SimulatedTarget(DefaultStatsTarget):
    """Target that "commits" operations after a random delay.

    Settings:
        latency_ms: mean commit latency
        jitter_ms: uniform jitter added around the mean
        failure_ratio: probability that an operation fails
        seed: optional random seed
    """

    def __init__(self, target_config: TargetConfig):
        super().__init__(target_config)
        settings = target_config.settings
        self.latency_ms = float(settings.get('latency_ms', 10.0))
        self.jitter_ms = float(settings.get('jitter_ms', 0.0))
        self.failure_ratio = float(settings.get('failure_ratio', 0.0))
        if not 0.0 <= self.failure_ratio <= 1.0:
            raise ValueError(f"failure_ratio must be within [0, 1], got {self.failure_ratio}")
        self._random = random.Random(settings.get('seed'))
        self._ids = itertools.count(1)

    async def get_context(self, label: str, client_args: Any) -> SimulatedContext:
        self.logger.debug(f"Creating simulated context for '{label}' ({client_args})")
        return SimulatedContext(target=self, label=label)

    async def release_context(self, context: SimulatedContext) -> None:
        self.logger.debug(f"Released simulated context '{context.label}' after {context.submitted} submissions")

    def _begin(self, context: SimulatedContext, count: int) -> List[TxResult]:
        results = [TxResult(tx_id=f"{context.label}-{next(self._ids)}") for _ in range(count)]
        context.submitted += count
        TargetUtils.notify_submitted(context, count)
        return results

    async def _complete(self, result: TxResult) -> TxResult:
        delay = self.latency_ms + self._random.uniform(-self.jitter_ms, self.jitter_ms)
        await asyncio.sleep(max(0.0, delay) / 1000)

        if self._random.random() < self.failure_ratio:
            return result.mark_failed("simulated failure")
        return result.mark_success()

    async def submit(self, context: SimulatedContext, payload: Any = None) -> TxResult:
        result, = self._begin(context, 1)
        return await self._complete(result)

    async def submit_batch(self, context: SimulatedContext, payloads: Sequence[Any]) -> List[TxResult]:
        """Submit several operations at once; all are reported as submitted before any wait."""
        results = self._begin(context, len(payloads))
        return list(await asyncio.gather(*(self._complete(result) for result in results)))
