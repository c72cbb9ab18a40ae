"""Exception hierarchy of the load client."""


class LoadClientError(Exception):
    """Base class for all load client errors."""


class ConfigurationError(LoadClientError):
    """A test command, target config or rate control config is invalid."""


class InitializationError(LoadClientError):
    """Workload or execution context setup failed; nothing was submitted."""


class FinalizationError(LoadClientError):
    """Rate controller end, context release or workload end failed."""


class ProtocolError(LoadClientError):
    """An incoming channel message is unrecognized or malformed."""


class RunInProgressError(ProtocolError):
    """A test command arrived while another run is still active."""
