"""Abstract target-system interface and the workload contract."""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, List, Optional, Sequence
from dataclasses import dataclass, field
from ..core.config import TargetConfig
from ..core.results import TxResult, TxStats
from ..utils.logging import LoggerMixin


async def call_hook(hook: Callable[..., Any], *args) -> Any:
    """Call a workload or target hook, awaiting it if it is asynchronous."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass
class Engine:
    """Capabilities the test driver exposes to the target's transport layer."""
    submit_callback: Callable[[int], None]


@dataclass
class ExecutionContext:
    """Minimal execution context used when a target provides none."""
    engine: Optional[Engine] = None
    properties: dict = field(default_factory=dict)


class Workload(ABC):
    """Workload contract; any object or module with these attributes works.

    ``init``, ``run`` and ``end`` may be coroutines or plain functions.
    ``run`` returns one result or a sequence of results.
    """

    info: str = ""

    @abstractmethod
    async def init(self, context: Any, args: dict) -> None:
        pass

    @abstractmethod
    async def run(self) -> Any:
        pass

    @abstractmethod
    async def end(self) -> None:
        pass


class AbstractTarget(LoggerMixin, ABC):
    """Abstract target system the workload is driven against."""

    def __init__(self, target_config: TargetConfig):
        super().__init__()
        self.config = target_config

    @abstractmethod
    async def get_context(self, label: str, client_args: Any) -> Optional[Any]:
        """Create the execution context for one run.

        Returns:
            A context object, or None to let the driver supply a minimal one
        """
        pass

    @abstractmethod
    async def release_context(self, context: Any) -> None:
        pass

    @abstractmethod
    def compute_snapshot(self, batch: Sequence[Any], detailed: bool = False) -> Any:
        """Compute a statistics snapshot over a batch of work results."""
        pass

    @abstractmethod
    def merge_snapshots(self, snapshots: Sequence[Any]) -> Any:
        """Merge chronologically ordered snapshots into one."""
        pass

    @abstractmethod
    def null_snapshot(self) -> Any:
        pass

    def failure_result(self, error: BaseException) -> Any:
        """Work result recorded for a work unit whose execution raised."""
        result = TxResult(tx_id="")
        return result.mark_failed(repr(error), final_time=result.create_time)

    @property
    def target_name(self) -> str:
        return self.config.name


class DefaultStatsTarget(AbstractTarget):
    """Target whose work results are TxResults summarized as TxStats."""

    def compute_snapshot(self, batch: Sequence[TxResult], detailed: bool = False) -> TxStats:
        return TxStats.from_results(batch, detailed)

    def merge_snapshots(self, snapshots: Sequence[TxStats]) -> TxStats:
        return TxStats.merge(snapshots)

    def null_snapshot(self) -> TxStats:
        return TxStats.null()


class TargetUtils:
    """Helpers shared by target implementations."""

    @staticmethod
    def attach_engine(context: Any, engine: Engine) -> None:
        """Expose the engine on an attribute context or under the ``engine`` key of a mapping one."""
        if isinstance(context, MutableMapping):
            context['engine'] = engine
        else:
            context.engine = engine

    @staticmethod
    def notify_submitted(context: Any, count: int = 1) -> None:
        """Report newly submitted work units through the context's engine."""
        if isinstance(context, Mapping):
            engine = context.get('engine')
        else:
            engine = getattr(context, 'engine', None)
        if engine is not None:
            engine.submit_callback(count)

    @staticmethod
    def flatten(results: Any) -> List[Any]:
        if isinstance(results, (list, tuple)):
            return list(results)
        return [results]
