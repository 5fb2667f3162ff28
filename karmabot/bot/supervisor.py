"""BotSupervisor - keeps one connection actor alive."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ..config.model import AppConfig, BotConfig
from ..constants import MANAGER_LOOP_SLEEP_SECONDS, SUPERVISOR_RESTART_DELAY
from ..errors.handling import log_error
from ..errors.internal import ConfigError
from ..irc.connection import IRCBot
from ..karma.store import KarmaStore
from .signal_handler import SignalHandler

BotFactory = Callable[[BotConfig, KarmaStore], IRCBot]


class BotSupervisor:  # pylint: disable=too-many-instance-attributes
    """Runs the connection actor as a task and restarts it when it crashes.

    Handles restarts for configuration changes and graceful shutdown on
    signals. A ``ConfigError`` while building the actor is the one failure
    that is not retried.

    Attributes:
        app_config: Configuration the current actor was built from.
        bot: The current connection actor, if any.
        task: Task running ``bot.run()``.
        crash_count: How many times the actor died with an exception.
        restart_requested: Set by ``request_restart``; consumed by the loop.
    """

    def __init__(
        self,
        app_config: AppConfig,
        *,
        restart_delay: float = SUPERVISOR_RESTART_DELAY,
        loop_sleep: float = MANAGER_LOOP_SLEEP_SECONDS,
        bot_factory: BotFactory = IRCBot,
    ) -> None:
        self.app_config = app_config
        self.restart_delay = restart_delay
        self.loop_sleep = loop_sleep
        self.bot_factory = bot_factory
        self.signals = SignalHandler()
        self.store: KarmaStore | None = None
        self.bot: IRCBot | None = None
        self.task: asyncio.Task[None] | None = None
        self.running = False
        self.crash_count = 0
        self.restart_requested = False
        self.new_config: AppConfig | None = None
        self._restart_at: float | None = None

    @property
    def shutdown_initiated(self) -> bool:
        return self.signals.shutdown_initiated

    def stop(self) -> None:
        self.signals.stop()

    def setup_signal_handlers(self) -> None:
        self.signals.setup_signal_handlers()

    def restore_signal_handlers(self) -> None:
        self.signals.restore_signal_handlers()

    def request_restart(self, new_config: AppConfig) -> None:
        """Ask the loop to rebuild the actor from ``new_config``."""
        self.new_config = new_config
        self.restart_requested = True

    def _store_for(self, app_config: AppConfig) -> KarmaStore:
        if self.store is None or self.store.path != app_config.karma_file:
            self.store = KarmaStore(app_config.karma_file)
        return self.store

    def start_bot(self) -> bool:
        """Build and launch the actor; False when the configuration is refused."""
        try:
            self.bot = self.bot_factory(self.app_config.bot, self._store_for(self.app_config))
        except ConfigError as e:
            log_error("Connection actor refused to start", e)
            self.bot = None
            return False
        self.task = asyncio.create_task(self.bot.run())
        logging.info(
            f"🏃 Connection actor started server={self.app_config.bot.server} "
            f"nick={self.app_config.bot.nickname}"
        )
        return True

    async def stop_bot(self) -> None:
        bot, task = self.bot, self.task
        self.bot = None
        self.task = None
        if bot is None or task is None:
            return
        if not task.done():
            bot.stop("supervisor stop")
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=5.0)
            except TimeoutError:
                logging.warning("⚠️ Connection actor did not stop in time - cancelling")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return
            except Exception as e:  # noqa: BLE001
                log_error("Connection actor failed while stopping", e)
                return
        elif not task.cancelled() and task.exception() is not None:
            log_error("Connection actor had crashed", task.exception())

    def _check_bot_task(self) -> None:
        """Notice a dead actor and arm the delayed restart."""
        task = self.task
        if task is None or not task.done():
            return
        self.task = None
        self.bot = None
        error = None if task.cancelled() else task.exception()
        self.crash_count += 1
        if error is not None:
            log_error("Connection actor crashed", error, context={"crashes": self.crash_count})
        else:
            logging.warning("⚠️ Connection actor exited unexpectedly")
        logging.info(f"🔁 Restarting connection actor in {self.restart_delay}s")
        self._restart_at = asyncio.get_running_loop().time() + self.restart_delay

    async def _restart_with_new_config(self) -> bool:
        self.restart_requested = False
        new_config, self.new_config = self.new_config, None
        if new_config is None:
            return True
        previous = self.app_config
        await self.stop_bot()
        self._restart_at = None
        self.app_config = new_config
        if self.start_bot():
            logging.info("✅ Connection actor restarted with new configuration")
            return True
        logging.error("⚠️ Restart failed - keeping previous config")
        self.app_config = previous
        return self.start_bot()

    async def run(self) -> bool:
        """Supervise until shutdown; returns False if the actor could not start."""
        if not self.start_bot():
            return False
        self.running = True
        loop = asyncio.get_running_loop()
        try:
            while self.running:
                await asyncio.sleep(self.loop_sleep)
                if self.shutdown_initiated:
                    logging.warning("🔻 Shutdown initiated - stopping connection actor")
                    break
                if self.restart_requested and not await self._restart_with_new_config():
                    break
                self._check_bot_task()
                if self._restart_at is not None and loop.time() >= self._restart_at:
                    self._restart_at = None
                    if not self.start_bot():
                        break
        finally:
            await self.stop_bot()
            self.running = False
        return True
