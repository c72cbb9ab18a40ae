"""Core components of the load client."""

from .config import ClientConfig, RunCommand, RateControlConfig, TargetConfig, TrimConfig, TrimMode
from .errors import (
    LoadClientError,
    ConfigurationError,
    InitializationError,
    FinalizationError,
    ProtocolError,
)
from .results import TxResult, TxStats, TxStatusCode

__all__ = [
    "ClientConfig",
    "RunCommand",
    "RateControlConfig",
    "TargetConfig",
    "TrimConfig",
    "TrimMode",
    "LoadClientError",
    "ConfigurationError",
    "InitializationError",
    "FinalizationError",
    "ProtocolError",
    "TxResult",
    "TxStats",
    "TxStatusCode",
]
