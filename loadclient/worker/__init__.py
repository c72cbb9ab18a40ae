"""Test execution engine of a client worker."""

from .channel import Channel, PipeChannel, QueueChannel
from .handler import ClientHandler
from .reporter import PeriodicReporter
from .run_state import ResultBuffer, RunPhase, RunState
from .test_driver import TestDriver
from .trim import StatsMerger, TrimPolicy

__all__ = [
    "Channel",
    "PipeChannel",
    "QueueChannel",
    "ClientHandler",
    "PeriodicReporter",
    "ResultBuffer",
    "RunPhase",
    "RunState",
    "TestDriver",
    "StatsMerger",
    "TrimPolicy",
]
