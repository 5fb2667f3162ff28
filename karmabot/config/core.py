"""Configuration loading entry points."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..constants import DEFAULT_CONFIG_FILE
from ..errors.internal import ConfigError
from .model import AppConfig, BotConfig
from .repository import ConfigRepository


def config_file_path() -> str:
    return os.environ.get("KARMABOT_CONF_FILE", DEFAULT_CONFIG_FILE)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
        for err in exc.errors()
    )


def build_app_config(data: Mapping[str, Any]) -> AppConfig:
    """Validate a raw mapping into ``AppConfig``.

    Raises:
        ConfigError: If required fields are missing or invalid.
    """
    if not data:
        raise ConfigError("configuration is empty")
    try:
        return AppConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {_describe(e)}") from e


def build_bot_config(data: BotConfig | Mapping[str, Any]) -> BotConfig:
    """Return ``data`` as a validated ``BotConfig``.

    Raises:
        ConfigError: If required fields are missing or invalid.
    """
    if isinstance(data, BotConfig):
        return data
    try:
        return BotConfig.from_dict(data)
    except ValidationError as e:
        raise ConfigError(f"invalid bot configuration: {_describe(e)}") from e


def load_config(config_file: str) -> AppConfig:
    """Load and validate the configuration file.

    Raises:
        ConfigError: If the file is missing, empty or invalid.
    """
    raw = ConfigRepository(config_file).load_raw()
    if not raw:
        raise ConfigError(f"no configuration found in {config_file}")
    return build_app_config(raw)


def get_configuration() -> AppConfig:
    """Load the configuration named by ``KARMABOT_CONF_FILE``.

    Raises:
        SystemExit: If the file is missing or invalid.
    """
    config_file = config_file_path()
    try:
        app_config = load_config(config_file)
    except ConfigError as e:
        logging.error(f"📁 {e}")
        sys.exit(1)
    bot = app_config.bot
    logging.info(
        f"✅ Configuration loaded server={bot.server}:{bot.port} nick={bot.nickname} "
        f"channels={len(bot.channels)} ssl={bot.ssl}"
    )
    return app_config
