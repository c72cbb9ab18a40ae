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

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from ..core.config import TrimConfig, TrimMode
from ..drivers.base import TargetUtils
from ..utils.timer import Timer


class RunPhase(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    SUBMITTING = "submitting"
    DRAINING = "draining"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"


class ResultBuffer:
    """
    Completed work results waiting for the next reporter tick.
    Filled by work unit completions, emptied by the reporter.
    """

    def __init__(self):
        self._results: List[Any] = []

    def add(self, result: Any):
        """Append one result, or every result of a sequence in order."""
        self._results.extend(TargetUtils.flatten(result))

    def swap(self) -> List[Any]:
        """Hand out the buffered results and start a new, empty buffer."""
        results, self._results = self._results, []
        return results

    def pending(self) -> List[Any]:
        """Live view of the buffered results; callers must not modify it."""
        return self._results

    def __len__(self) -> int:
        return len(self._results)


@dataclass
class RunState:
    """
    Mutable state of one test run, shared by the driver and the reporter.

    ``baseline`` is the accepted aggregate and ``pending`` the snapshot being
    merged into it. ``has_baseline`` tracks acceptance separately because a
    target's snapshot may itself be falsy.
    """
    trim: TrimConfig = field(default_factory=TrimConfig.none)
    submitted: int = 0
    last_reported: int = 0
    results: ResultBuffer = field(default_factory=ResultBuffer)
    trim_remaining: int = 0
    start_time: float = 0.0
    timer: Optional[Timer] = None
    baseline: Any = None
    pending: Any = None
    has_baseline: bool = False
    phase: RunPhase = RunPhase.IDLE

    def __post_init__(self):
        if self.trim.mode == TrimMode.COUNT:
            self.trim_remaining = int(self.trim.threshold)

    def submit_callback(self, count: int):
        """Record ``count`` newly submitted, not yet completed, work units."""
        if count < 0:
            raise ValueError(f"submitted count cannot decrease, got {count}")
        self.submitted += count

    def elapsed_seconds(self) -> float:
        return self.timer.elapsed_seconds() if self.timer is not None else 0.0

    def accept_baseline(self, snapshot: Any):
        self.baseline = snapshot
        self.has_baseline = True
