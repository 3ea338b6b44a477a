"""Configuration models and YAML loading."""

from mnemo.config.loader import DEFAULT_CONFIG_PATH, load_config, save_config
from mnemo.config.schema import MnemoConfig

__all__ = ["DEFAULT_CONFIG_PATH", "MnemoConfig", "load_config", "save_config"]
