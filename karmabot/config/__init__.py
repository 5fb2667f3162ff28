"""Configuration models, loading and file watching."""

from .core import (
    build_app_config,
    build_bot_config,
    config_file_path,
    get_configuration,
    load_config,
)
from .model import AppConfig, BotConfig
from .watcher import ConfigWatcher, create_config_watcher

__all__ = [
    "AppConfig",
    "BotConfig",
    "ConfigWatcher",
    "build_app_config",
    "build_bot_config",
    "config_file_path",
    "create_config_watcher",
    "get_configuration",
    "load_config",
]
