"""Per-process execution engine of a load-testing client."""

__version__ = "0.1.0"
