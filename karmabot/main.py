#!/usr/bin/env python3
"""
Main entry point for the karma bot
"""

import asyncio
import logging
import sys

from .bot.supervisor import BotSupervisor
from .config import config_file_path, create_config_watcher, get_configuration
from .errors.handling import log_error
from .logging_config import LoggerConfigurator


async def main() -> None:
    """Load configuration, start the config watcher and supervise the bot.

    Raises:
        SystemExit: If the configuration is invalid or the bot refuses to start.
    """
    logging.info("🚀 Starting karma bot")
    config_file = config_file_path()
    app_config = get_configuration()

    supervisor = BotSupervisor(app_config)
    supervisor.setup_signal_handlers()

    loop = asyncio.get_running_loop()
    watcher = await create_config_watcher(
        config_file,
        lambda new_config: loop.call_soon_threadsafe(
            supervisor.request_restart, new_config
        ),
    )
    try:
        started = await supervisor.run()
    finally:
        supervisor.restore_signal_handlers()
        await loop.run_in_executor(None, watcher.stop)
        logging.info("✅ Application shutdown complete")
    if not started:
        sys.exit(1)


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
