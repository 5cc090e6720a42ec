"""Environment file and global configuration loading."""

from pathlib import Path
from typing import Any

import yaml


def get_global_config_path() -> Path:
    """Return the path of the global ~/.rangescan/config.yml file."""
    return Path.home() / ".rangescan" / "config.yml"


def load_env_file(env_path: Path) -> dict[str, str]:
    """Load KEY=VALUE pairs from a .env file."""
    env_vars = {}
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    # Remove quotes if present
                    value = value.strip().strip("\"'")
                    env_vars[key.strip()] = value
    return env_vars


def load_global_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load the global YAML configuration."""
    config_path = config_path or get_global_config_path()
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        return data if isinstance(data, dict) else {}
    return {}


def load_local_env(directory: Path | None = None) -> dict[str, str]:
    """Load the .env file from the given directory (default: working directory)."""
    directory = directory or Path.cwd()
    return load_env_file(directory / ".env")
