"""
Configuration management for rangescan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. .env file in the working directory
3. Global config file (~/.rangescan/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    get_global_config_path,
    load_env_file,
    load_global_config,
    load_local_env,
)
from .getters import get_bool, get_config, get_float, get_int
from .settings import (
    DEFAULT_CHECKPOINT_BACKEND,
    DEFAULT_HEALTH_PORT,
    DEFAULT_UPDATE_INTERVAL,
    NotifierSettings,
    get_checkpoint_backend,
    get_health_port,
    get_update_interval,
    is_verbose,
    load_notifier_settings,
)

__all__ = [
    # env_loader
    "get_global_config_path",
    "load_env_file",
    "load_global_config",
    "load_local_env",
    # getters
    "get_bool",
    "get_config",
    "get_float",
    "get_int",
    # settings
    "DEFAULT_CHECKPOINT_BACKEND",
    "DEFAULT_HEALTH_PORT",
    "DEFAULT_UPDATE_INTERVAL",
    "NotifierSettings",
    "get_checkpoint_backend",
    "get_health_port",
    "get_update_interval",
    "is_verbose",
    "load_notifier_settings",
]
