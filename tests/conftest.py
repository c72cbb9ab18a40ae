"""Shared fakes for the load client tests."""

import asyncio
from types import SimpleNamespace
from dataclasses import dataclass
from typing import Any, List

import pytest

from loadclient.core.config import TargetConfig
from loadclient.drivers.base import AbstractTarget, TargetUtils


@dataclass
class Snap:
    """Synthetic snapshot exposing only count and sum (plus failures)."""
    count: int = 0
    sum: int = 0
    failed: int = 0


class CountingTarget(AbstractTarget):
    """Target whose results are integers and whose failures are None."""

    def __init__(self, context=None, fail_release=False):
        super().__init__(TargetConfig(targetClass="tests.conftest.CountingTarget"))
        self.context = context
        self.fail_release = fail_release
        self.released = []
        self.merges: List[List[Snap]] = []

    async def get_context(self, label, client_args):
        return self.context

    async def release_context(self, context):
        if self.fail_release:
            raise RuntimeError("release failed")
        self.released.append(context)

    def compute_snapshot(self, batch, detailed=False):
        values = [r for r in batch if r is not None]
        return Snap(count=len(values), sum=sum(values), failed=len(batch) - len(values))

    def merge_snapshots(self, snapshots):
        self.merges.append(list(snapshots))
        return Snap(
            count=sum(s.count for s in snapshots),
            sum=sum(s.sum for s in snapshots),
            failed=sum(s.failed for s in snapshots),
        )

    def null_snapshot(self):
        return Snap()

    def failure_result(self, error):
        return None


class FakeWorkload:
    """Workload returning 1, 2, 3, ... and notifying each submission."""

    info = "fake"

    def __init__(self, fail_on=(), per_unit=1, fail_init=False, fail_end=False, notify=True):
        self.fail_on = set(fail_on)
        self.per_unit = per_unit
        self.fail_init = fail_init
        self.fail_end = fail_end
        self.notify = notify
        self.context = None
        self.args = None
        self.calls = 0
        self.ended = False

    async def init(self, context, args):
        if self.fail_init:
            raise RuntimeError("init failed")
        self.context = context
        self.args = args

    async def run(self):
        self.calls += 1
        n = self.calls
        if self.notify:
            TargetUtils.notify_submitted(self.context, self.per_unit)
        await asyncio.sleep(0)
        if n in self.fail_on:
            raise RuntimeError(f"unit {n} failed")
        if self.per_unit == 1:
            return n
        return [n] * self.per_unit

    def end(self):
        if self.fail_end:
            raise RuntimeError("end failed")
        self.ended = True


class RecordingController:
    """Rate controller recording its calls; yields once per pacing."""

    def __init__(self, fail_on_call=None):
        self.fail_on_call = fail_on_call
        self.run_config = None
        self.calls = []
        self.ended = 0

    def init(self, run_config):
        self.run_config = run_config

    async def apply_pacing(self, start_time, submitted, results):
        self.calls.append((start_time, submitted, len(results)))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("pacing failed")
        await asyncio.sleep(0)

    async def end(self):
        self.ended += 1


class ManualClock:
    """Nanosecond clock advanced by hand."""

    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += int(seconds * 1_000_000_000)


@pytest.fixture
def events() -> List[Any]:
    return []


@pytest.fixture
def target():
    return CountingTarget()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def fakes():
    """Fake collaborator classes, for tests that need custom instances."""
    return SimpleNamespace(
        Snap=Snap,
        CountingTarget=CountingTarget,
        FakeWorkload=FakeWorkload,
        RecordingController=RecordingController,
    )
