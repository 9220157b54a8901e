"""
Client configuration: dataclass defaults, YAML and environment overrides.
"""
from .defaults import ClientConfig, get_default_config
from .loader import ConfigLoader, load_config

__all__ = ["ClientConfig", "ConfigLoader", "get_default_config", "load_config"]
