"""Rate controllers pacing the submission loop."""

from ..core.config import RateControlConfig
from ..core.errors import ConfigurationError
from .base import RateController
from .controllers import FixedRateController, LinearRateController, NoRateController

CONTROLLERS = {
    'no-rate': NoRateController,
    'fixed-rate': FixedRateController,
    'linear-rate': LinearRateController,
}


def create_rate_controller(config: RateControlConfig) -> RateController:
    """Factory function selecting a controller by ``config.type``."""
    try:
        controller_class = CONTROLLERS[config.type]
    except KeyError:
        raise ConfigurationError(
            f"unknown rate control type '{config.type}', expected one of {sorted(CONTROLLERS)}"
        ) from None
    return controller_class(config.opts)


__all__ = [
    "RateController",
    "NoRateController",
    "FixedRateController",
    "LinearRateController",
    "create_rate_controller",
]
