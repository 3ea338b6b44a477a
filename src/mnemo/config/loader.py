"""Configuration loading and validation."""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from mnemo.config.schema import MnemoConfig
from mnemo.errors import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".mnemo" / "mnemo.yaml"

# Overrides the default location when no explicit path is given
CONFIG_ENV_VAR = "MNEMO_CONFIG"


def resolve_config_path(path: Path | None = None) -> Path:
    """Return the config path to use.

    Args:
        path: Explicit path, wins over the environment and the default

    Returns:
        Path to the configuration file (may not exist)
    """
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> MnemoConfig:
    """Load and validate mnemo configuration from a YAML file.

    Args:
        path: Path to config file. If None, uses $MNEMO_CONFIG or the default
              location. If the file doesn't exist, returns default config.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If config file exists but is invalid
    """
    path = resolve_config_path(path)

    # Zero-config mode: if file doesn't exist, use all defaults
    if not path.exists():
        return MnemoConfig()

    try:
        with open(path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            return MnemoConfig()

        if not isinstance(config_data, dict):
            raise ConfigError(f"Configuration in {path} must be a mapping")

        return MnemoConfig(**config_data)

    except ConfigError:
        raise
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def save_config(config: MnemoConfig, path: str | Path | None = None) -> None:
    """Save configuration to a YAML file.

    Args:
        config: Configuration object to save
        path: Destination path. If None, uses the default location.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(path, "w") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)
