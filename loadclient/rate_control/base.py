"""Rate controller contract consumed by the test driver."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence

from ..utils.logging import LoggerMixin


class RateController(LoggerMixin, ABC):
    """Decides when the next work unit may be submitted.

    The driver calls ``apply_pacing`` once after every submission; it is the
    submission loop's only suspension point, so implementations must
    suspend at least once per call.
    """

    def __init__(self, opts: Dict[str, Any]):
        super().__init__()
        self.opts = opts

    def init(self, run_config: Dict[str, Any]) -> None:
        """Prepare for a run described by ``RunCommand.run_config()``."""

    @abstractmethod
    async def apply_pacing(self, start_time: float, submitted: int, results: Sequence[Any]) -> None:
        """Wait until the next submission is due.

        Args:
            start_time: epoch seconds at which submission started
            submitted: work units submitted so far
            results: results completed but not yet reported
        """

    async def end(self) -> None:
        """Release resources at the end of the run."""
