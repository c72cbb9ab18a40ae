"""Test warm-up trimming and incremental merging."""

import pytest

from loadclient.core.config import TrimConfig, TrimMode
from loadclient.utils.timer import Timer
from loadclient.worker.run_state import ResultBuffer, RunState
from loadclient.worker.trim import StatsMerger, TrimPolicy


def _state(mode=TrimMode.NONE, threshold=0, clock=None):
    state = RunState(trim=TrimConfig(mode, threshold))
    state.timer = Timer(clock)
    return state


def _tick(policy, state, target, batch):
    policy.apply(state, batch, target.compute_snapshot(batch))


class TestResultBuffer:
    """Test the buffer between work units and the reporter."""

    def test_add_flattens_sequences(self):
        buffer = ResultBuffer()
        buffer.add(1)
        buffer.add([2, 3])
        buffer.add((4,))

        assert len(buffer) == 4
        assert buffer.pending() == [1, 2, 3, 4]

    def test_swap_empties_buffer(self):
        buffer = ResultBuffer()
        buffer.add(1)

        assert buffer.swap() == [1]
        assert len(buffer) == 0
        assert buffer.swap() == []


class TestRunState:
    """Test run state bookkeeping."""

    def test_count_trim_initializes_remaining(self):
        assert RunState(trim=TrimConfig(TrimMode.COUNT, 3)).trim_remaining == 3
        assert RunState().trim_remaining == 0

    def test_submit_callback(self):
        state = RunState()
        state.submit_callback(2)
        state.submit_callback(0)
        assert state.submitted == 2

        with pytest.raises(ValueError):
            state.submit_callback(-1)


class TestStatsMerger:
    """Test the merge contract used by the trim policy."""

    def test_merge_is_independent_of_partition(self, target):
        """Test that folding any partition of a batch tick by tick gives the same aggregate."""
        results = [1, 2, None, 4, 5, 6, None, 8]
        merger = StatsMerger(target)
        expected = target.compute_snapshot(results)

        for cuts in ([], [1], [3, 4], [2, 5, 7], list(range(1, 8))):
            bounds = [0] + cuts + [len(results)]
            parts = [results[a:b] for a, b in zip(bounds, bounds[1:])]
            aggregate = target.compute_snapshot(parts[0])
            for part in parts[1:]:
                aggregate = merger.merge(aggregate, target.compute_snapshot(part))
            assert aggregate == expected

    def test_merge_passes_two_snapshots_in_order(self, target, fakes):
        earlier, later = fakes.Snap(1, 1), fakes.Snap(2, 5)
        StatsMerger(target).merge(earlier, later)
        assert target.merges == [[earlier, later]]


class TestTrimPolicy:
    """Test baseline acceptance per trim mode."""

    def test_no_trim_accepts_first_tick(self, target):
        state = _state()
        policy = TrimPolicy(target)

        _tick(policy, state, target, [1, 2])
        assert state.has_baseline
        assert state.baseline.count == 2

        _tick(policy, state, target, [3])
        assert state.baseline.count == 3
        assert state.baseline.sum == 6
        assert state.pending is None

    def test_count_trim_across_ticks(self, target):
        """Test that trimming three results over ticks [1, 2] and [3, 4, 5, 6] keeps 4, 5 and 6."""
        state = _state(TrimMode.COUNT, 3)
        policy = TrimPolicy(target)

        _tick(policy, state, target, [1, 2])
        assert not state.has_baseline
        assert state.trim_remaining == 1

        _tick(policy, state, target, [3, 4, 5, 6])
        assert state.has_baseline
        assert state.trim_remaining == 0
        assert state.baseline.count == 3
        assert state.baseline.sum == 15

    def test_count_trim_exact_boundary(self, target):
        state = _state(TrimMode.COUNT, 2)
        policy = TrimPolicy(target)

        _tick(policy, state, target, [1, 2])
        assert not state.has_baseline
        assert state.trim_remaining == 0

        _tick(policy, state, target, [3])
        assert state.baseline.count == 1
        assert state.baseline.sum == 3

    def test_count_trim_larger_than_run(self, target):
        state = _state(TrimMode.COUNT, 10)
        policy = TrimPolicy(target)

        _tick(policy, state, target, [1, 2, 3])
        _tick(policy, state, target, [4])

        assert not state.has_baseline
        assert state.trim_remaining == 6

    def test_count_trim_zero_keeps_everything(self, target):
        state = _state(TrimMode.COUNT, 0)
        policy = TrimPolicy(target)

        _tick(policy, state, target, [1])
        assert state.baseline.sum == 1

    def test_duration_trim(self, target, clock):
        state = _state(TrimMode.DURATION, 2, clock=clock)
        policy = TrimPolicy(target)

        clock.advance(1)
        _tick(policy, state, target, [1, 2])
        assert not state.has_baseline

        clock.advance(1)
        _tick(policy, state, target, [3])
        assert state.has_baseline
        assert state.baseline.sum == 3

        clock.advance(1)
        _tick(policy, state, target, [4, 5])
        assert state.baseline.count == 3
        assert state.baseline.sum == 12

    def test_merges_are_chronological(self, target, fakes):
        state = _state()
        policy = TrimPolicy(target)

        for batch in ([1], [2], [3]):
            _tick(policy, state, target, batch)

        assert target.merges == [
            [fakes.Snap(1, 1), fakes.Snap(1, 2)],
            [fakes.Snap(2, 3), fakes.Snap(1, 3)],
        ]
