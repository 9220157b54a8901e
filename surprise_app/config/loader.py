"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ApiParams,
    ClientConfig,
    ExportParams,
    LoadingParams,
    LoggingParams,
    SelectionParams,
    get_default_config,
)
from .validation import ConfigValidator

API_URL_ENV_VAR = "SURPRISE_API_URL"
CONFIG_FILENAME = "client.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ClientConfig
    environ: Mapping[str, str]

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
            environ=os.environ if environ is None else environ,
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML config file, if present."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f) or {}

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping",
                field=str(config_file),
                value=type(file_config).__name__
            )

        return file_config

    def load_env_config(self) -> dict[str, Any]:
        """Load overrides from environment variables."""
        base_url = self.environ.get(API_URL_ENV_VAR)
        if base_url is None:
            return {}
        return {"api": {"base_url": base_url}}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Config file, then environment variables
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> ClientConfig:
        """Merge, validate and build a ClientConfig."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            first = errors[0]
            raise ConfigurationError(
                f"Invalid configuration: {first.field}: {first.message}",
                field=first.field,
                value=first.value,
                context={"errors": [f"{e.field}: {e.message}" for e in errors]}
            )

        return ClientConfig(
            api=ApiParams(**merged["api"]),
            loading=LoadingParams(**merged["loading"]),
            export=ExportParams(**merged["export"]),
            selection=SelectionParams(**merged["selection"]),
            logging=LoggingParams(**merged["logging"]),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_dir: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None
) -> ClientConfig:
    """Load the client configuration from all tiers."""
    return ConfigLoader.create(config_dir).load(overrides)
