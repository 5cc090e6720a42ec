"""Configuration getter functions."""

import logging
import os
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_local_env

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


def get_config(key: str, default: Any = None, env_dir: Path | None = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. .env file in env_dir (working directory by default)
    3. Global config file
    4. Default value
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    local_env = load_local_env(env_dir)
    if key in local_env:
        return local_env[key]

    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    return default


def get_bool(key: str, default: bool = False, env_dir: Path | None = None) -> bool:
    """Read a boolean flag ("1", "true", "yes", "on" are truthy)."""
    value = get_config(key, None, env_dir)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def get_int(key: str, default: int, env_dir: Path | None = None) -> int:
    """Read an integer setting, falling back to default when invalid."""
    value = get_config(key, None, env_dir)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid integer for %s: %r", key, value)
        return default


def get_float(key: str, default: float, env_dir: Path | None = None) -> float:
    """Read a float setting, falling back to default when invalid."""
    value = get_config(key, None, env_dir)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid number for %s: %r", key, value)
        return default
