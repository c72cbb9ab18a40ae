# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Periodic progress reporting for a running test.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from ..utils.logging import LoggerMixin
from .run_state import RunState
from .trim import TrimPolicy


class PeriodicReporter(LoggerMixin):
    """
    Drains the run's result buffer on a fixed interval, emits a progress
    event per non-empty tick and feeds each snapshot to the trim policy.
    """

    def __init__(self, state: RunState, target, emit: Callable[[Dict[str, Any]], None],
                 interval: float = 1.0, trim_policy: Optional[TrimPolicy] = None):
        """
        :param state: Run state to drain
        :param target: Target system computing snapshots
        :param emit: Synchronous event sink, e.g. Channel.send
        :param interval: Seconds between ticks
        :param trim_policy: Policy receiving every snapshot
        """
        super().__init__()
        self.state = state
        self.target = target
        self.emit = emit
        self.interval = interval
        self.trim_policy = trim_policy if trim_policy is not None else TrimPolicy(target)
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    def start(self):
        if self._task is not None:
            raise RuntimeError("reporter already started")
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                # Unreported results stay buffered for the next tick
                self.logger.exception("Progress report failed")

    def tick(self) -> Optional[Any]:
        """
        Report everything that arrived since the previous tick.
        Runs without suspending, so no result can slip in between the counter
        read and the buffer swap. The snapshot is computed before the buffer
        is swapped; if the target fails to compute it, nothing is consumed.

        :return: The snapshot reported, or None for an empty tick
        """
        state = self.state
        delta = state.submitted - state.last_reported
        pending = state.results.pending()

        if not pending and delta == 0:
            return None

        if pending:
            snapshot = self.target.compute_snapshot(pending, False)
        else:
            snapshot = self.target.null_snapshot()

        state.last_reported += delta
        batch = state.results.swap()

        self.emit({'type': 'progress', 'data': {'submittedDelta': delta, 'committed': snapshot}})
        self.trim_policy.apply(state, batch, snapshot)
        return snapshot

    async def stop(self):
        """Cancel the timer and flush the remaining results with a final tick."""
        if self._stopped:
            return
        self._stopped = True

        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self.tick()
