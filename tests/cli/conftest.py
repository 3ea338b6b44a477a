"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Write a config whose database lives in the temporary directory."""
    config_path = tmp_path / "mnemo.yaml"
    config_path.write_text(
        yaml.safe_dump({"storage": {"path": str(tmp_path / "memory.db")}})
    )
    return config_path


@pytest.fixture
def cli_args(tmp_config_path: Path):
    """Append the temporary ``--config`` option to a command line."""

    def build(*args: str) -> list[str]:
        return [*args, "--config", str(tmp_config_path)]

    return build
