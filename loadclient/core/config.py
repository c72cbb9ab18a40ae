"""Configuration management for the load client."""

import yaml
from dataclasses import dataclass
from typing import Dict, Optional, Any, Union
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from enum import Enum

from ..utils.env import Env
from .errors import ConfigurationError


class TrimMode(str, Enum):
    """How the warm-up portion of a run is excluded from final statistics."""
    NONE = "none"
    DURATION = "duration"  # threshold in seconds since the run started
    COUNT = "count"        # threshold in raw results


@dataclass(frozen=True)
class TrimConfig:
    mode: TrimMode = TrimMode.NONE
    threshold: float = 0

    @classmethod
    def none(cls) -> "TrimConfig":
        return cls()


class RateControlConfig(BaseModel):
    """Rate controller selection, e.g. ``{type: fixed-rate, opts: {tps: 50}}``."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="no-rate", description="Rate controller type")
    opts: Dict[str, Any] = Field(default_factory=dict)


class TargetConfig(BaseModel):
    """Target system configuration model."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="target", description="Target system name")
    target_class: str = Field(alias="targetClass", description="Target class path")
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('target_class')
    @classmethod
    def check_class_path(cls, v):
        if '.' not in v:
            raise ValueError(f"targetClass must be a dotted path, got '{v}'")
        return v


class RunCommand(BaseModel):
    """Payload of a ``test`` command sent by the controller.

    Exactly one of ``count`` and ``durationSeconds`` selects between the
    fixed-number and the duration run mode.
    """

    model_config = ConfigDict(populate_by_name=True)

    workload_module: str = Field(alias="workloadModule", description="Workload module path")
    target_config: Union[TargetConfig, str] = Field(alias="targetConfig")
    label: str = Field(default="default")
    client_args: Any = Field(alias="clientArgs", default=None)
    workload_args: Dict[str, Any] = Field(alias="workloadArgs", default_factory=dict)

    count: Optional[int] = Field(default=None, ge=0)
    duration_seconds: Optional[float] = Field(alias="durationSeconds", default=None)

    rate_control: RateControlConfig = Field(alias="rateControlConfig", default_factory=RateControlConfig)
    trim: float = Field(default=0, ge=0)

    @model_validator(mode='after')
    def check_run_mode(self):
        if (self.count is None) == (self.duration_seconds is None):
            raise ValueError("exactly one of 'count' and 'durationSeconds' must be given")
        return self

    @property
    def is_duration(self) -> bool:
        return self.duration_seconds is not None

    def trim_config(self) -> TrimConfig:
        """Trim mode follows the run mode: seconds for duration runs, results otherwise."""
        if not self.trim:
            return TrimConfig.none()
        if self.is_duration:
            return TrimConfig(TrimMode.DURATION, float(self.trim))
        return TrimConfig(TrimMode.COUNT, int(self.trim))

    def run_config(self) -> Dict[str, Any]:
        """Run description handed to the rate controller's init."""
        return {
            'label': self.label,
            'count': self.count,
            'duration_seconds': self.duration_seconds,
            'opts': dict(self.rate_control.opts),
        }


class ClientConfig(BaseModel):
    """Per-process client settings."""

    update_interval: float = Field(default=1.0, gt=0, description="Progress report interval in seconds")
    result_delay: float = Field(default=0.2, ge=0, description="Delay before the final result event")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Log file path")


class ConfigLoader:
    """Configuration loader utility."""

    @staticmethod
    def _load_yaml(file_path: Union[str, Path]) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"cannot read {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{file_path} does not contain a mapping")
        return data

    @staticmethod
    def load_command(file_path: Union[str, Path]) -> RunCommand:
        """Load a run command from a YAML file.

        A relative ``targetConfig`` path is resolved against the file's directory.
        """
        data = ConfigLoader._load_yaml(file_path)
        target = data.get('targetConfig')
        if isinstance(target, str) and not Path(target).is_absolute():
            data['targetConfig'] = str(Path(file_path).parent / target)
        return RunCommand(**data)

    @staticmethod
    def load_target(file_path: Union[str, Path]) -> TargetConfig:
        """Load target configuration from YAML file."""
        return TargetConfig(**ConfigLoader._load_yaml(file_path))

    @staticmethod
    def resolve_target(target: Union[TargetConfig, str]) -> TargetConfig:
        """Return an inline target config as is, or load it from its path."""
        if isinstance(target, TargetConfig):
            return target
        return ConfigLoader.load_target(Path(target).expanduser())


def load_env_config() -> ClientConfig:
    """Load client configuration from LOAD_CLIENT_* environment variables."""
    return ClientConfig(
        update_interval=Env.get_double('UPDATE_INTERVAL', 1.0),
        result_delay=Env.get_double('RESULT_DELAY', 0.2),
        log_level=Env.get_str('LOG_LEVEL', 'INFO'),
        log_file=Env.get_str('LOG_FILE', None),
    )
