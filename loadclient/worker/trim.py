"""Warm-up trimming and incremental merging of statistics snapshots."""

from typing import Any, Sequence

from ..core.config import TrimMode
from ..utils.logging import LoggerMixin
from .run_state import RunState


class StatsMerger:
    """Folds a later snapshot into an earlier one via the target."""

    def __init__(self, target):
        self.target = target

    def merge(self, earlier: Any, later: Any) -> Any:
        return self.target.merge_snapshots([earlier, later])


class TrimPolicy(LoggerMixin):
    """Decides per reporter tick whether a snapshot is discarded or accepted.

    Until a baseline exists, snapshots are discarded according to the run's
    trim mode. The first accepted snapshot becomes the baseline and every
    later snapshot is merged into it.
    """

    def __init__(self, target, merger: StatsMerger = None):
        super().__init__()
        self.target = target
        self.merger = merger if merger is not None else StatsMerger(target)

    def apply(self, state: RunState, batch: Sequence[Any], snapshot: Any) -> None:
        """Account one tick's raw batch and its snapshot into the run state."""
        if state.has_baseline:
            state.pending = snapshot
            state.baseline = self.merger.merge(state.baseline, state.pending)
            state.pending = None
            return

        mode = state.trim.mode
        if mode == TrimMode.NONE:
            state.accept_baseline(snapshot)
        elif mode == TrimMode.DURATION:
            elapsed = state.elapsed_seconds()
            if elapsed >= state.trim.threshold:
                self.logger.debug(f"Warm-up of {state.trim.threshold}s over at {elapsed:.3f}s")
                state.accept_baseline(snapshot)
        elif mode == TrimMode.COUNT:
            self._trim_count(state, batch, snapshot)

    def _trim_count(self, state: RunState, batch: Sequence[Any], snapshot: Any) -> None:
        if state.trim_remaining <= 0:
            state.accept_baseline(snapshot)
        elif len(batch) <= state.trim_remaining:
            state.trim_remaining -= len(batch)
        else:
            kept = batch[state.trim_remaining:]
            self.logger.debug(f"Trimmed {state.trim_remaining} results, keeping {len(kept)} of the batch")
            state.trim_remaining = 0
            state.accept_baseline(self.target.compute_snapshot(kept, False))
