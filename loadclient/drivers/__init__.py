"""Target systems and workload loading."""

from .base import AbstractTarget, DefaultStatsTarget, Engine, ExecutionContext, Workload
from .loader import load_target, load_workload
from .simulated import SimulatedTarget

__all__ = [
    "AbstractTarget",
    "DefaultStatsTarget",
    "Engine",
    "ExecutionContext",
    "Workload",
    "SimulatedTarget",
    "load_target",
    "load_workload",
]
