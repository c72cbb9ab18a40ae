"""Dynamic loading of workload modules and target classes."""

import importlib
import importlib.util
from pathlib import Path
from typing import Any

from ..core.config import TargetConfig
from ..core.errors import ConfigurationError
from .base import AbstractTarget

WORKLOAD_HOOKS = ('init', 'run', 'end')


def _import_file(path: Path):
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"cannot load workload file {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_workload(workload_module: str) -> Any:
    """Load a workload from a ``.py`` file path or a dotted module path.

    A dotted path may end in ``:attribute`` to pick a workload object or
    class inside the module; a class is instantiated without arguments.
    """
    attribute = None
    path = Path(workload_module).expanduser()
    try:
        if workload_module.endswith('.py') or path.is_file():
            workload = _import_file(path)
        else:
            module_name, _, attribute = workload_module.partition(':')
            workload = importlib.import_module(module_name)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"cannot load workload '{workload_module}': {e}") from e

    if attribute:
        try:
            workload = getattr(workload, attribute)
        except AttributeError as e:
            raise ConfigurationError(f"workload '{workload_module}' has no attribute '{attribute}'") from e
        if isinstance(workload, type):
            workload = workload()

    missing = [hook for hook in WORKLOAD_HOOKS if not callable(getattr(workload, hook, None))]
    if missing:
        raise ConfigurationError(f"workload '{workload_module}' lacks {', '.join(missing)}")
    return workload


def load_target(target_config: TargetConfig) -> AbstractTarget:
    """Instantiate the target class named by the config."""
    module_path, class_name = target_config.target_class.rsplit('.', 1)
    try:
        module = importlib.import_module(module_path)
        target_class = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"cannot load target class '{target_config.target_class}': {e}") from e

    if not (isinstance(target_class, type) and issubclass(target_class, AbstractTarget)):
        raise ConfigurationError(f"'{target_config.target_class}' is not an AbstractTarget")
    return target_class(target_config)
