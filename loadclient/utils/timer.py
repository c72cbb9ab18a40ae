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

import time
from typing import Callable, Optional


NANOS_PER_SECOND = 1_000_000_000


class Timer:
    """Monotonic elapsed-time measurement for a single test run."""

    def __init__(self, nano_clock: Optional[Callable[[], int]] = None):
        """
        Create a Timer started at the current clock reading.

        :param nano_clock: Optional nanosecond clock function. Defaults to time.perf_counter_ns
        """
        self.nano_clock = nano_clock if nano_clock is not None else time.perf_counter_ns
        self.start_time = self.nano_clock()

    def elapsed_millis(self) -> float:
        return self._elapsed(1_000_000)

    def elapsed_seconds(self) -> float:
        """
        Get elapsed time in seconds.

        :return: Elapsed time in seconds
        """
        return self._elapsed(NANOS_PER_SECOND)

    def _elapsed(self, nanos_per_unit: int) -> float:
        now = self.nano_clock()
        return (now - self.start_time) / float(nanos_per_unit)
