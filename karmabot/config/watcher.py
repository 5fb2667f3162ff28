"""
Reload the configuration file when it changes on disk
"""

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..errors.internal import ConfigError
from ..logs.logger import logger
from .core import load_config
from .model import AppConfig

RestartCallback = Callable[[AppConfig], Any]


class ConfigFileHandler(FileSystemEventHandler):
    """Forwards events about one file to its watcher.

    Editors often produce several events per save (truncate, write, rename),
    so an event only counts when the file's mtime moved past the last one
    that triggered a reload.
    """

    def __init__(self, config_file: str, watcher: "ConfigWatcher"):
        super().__init__()
        self.config_file = os.path.abspath(config_file)
        self.watcher = watcher
        self._seen_mtime = 0.0

    def _is_fresh_edit(self) -> bool:
        try:
            mtime = os.path.getmtime(self.config_file)
        except OSError:
            return False
        if mtime <= self._seen_mtime:
            return False
        self._seen_mtime = mtime
        return True

    def _dispatch_path(self, path: str) -> None:
        if path and os.path.abspath(path) == self.config_file and self._is_fresh_edit():
            self.watcher._on_config_changed()  # noqa: SLF001

    def on_modified(self, event: FileSystemEvent) -> None:
        self._dispatch_path(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        self._dispatch_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves rename a temporary file onto the config path
        self._dispatch_path(getattr(event, "dest_path", "") or event.src_path)


class ConfigWatcher:
    """Watches the config directory and passes each valid revision on.

    ``restart_callback`` runs on the watchdog observer thread.
    """

    def __init__(self, config_file: str, restart_callback: RestartCallback):
        self.config_file = config_file
        self.restart_callback = restart_callback
        self.observer: Any | None = None

    @property
    def running(self) -> bool:
        return self.observer is not None

    def start(self) -> None:
        if self.running:
            return
        directory = os.path.dirname(os.path.abspath(self.config_file))
        if not os.path.isdir(directory):
            logger.log_event(
                "config_watch", "dir_missing", level=logging.WARNING, path=directory
            )
            return
        observer = Observer()
        observer.schedule(ConfigFileHandler(self.config_file, self), directory, recursive=False)
        try:
            observer.start()
        except OSError as e:
            logger.log_event(
                "config_watch", "start_failed", level=logging.ERROR, error=str(e)
            )
            return
        self.observer = observer
        logger.log_event("config_watch", "start", path=self.config_file)

    def stop(self) -> None:
        observer, self.observer = self.observer, None
        if observer is None:
            return
        observer.stop()
        observer.join()
        logger.log_event("config_watch", "stopped")

    def _on_config_changed(self) -> None:
        try:
            new_config = load_config(self.config_file)
        except ConfigError as e:
            logger.log_event("config_watch", "invalid", level=logging.WARNING, error=str(e))
            return
        logger.log_event("config_watch", "reload", path=self.config_file)
        self.restart_callback(new_config)


async def create_config_watcher(
    config_file: str, restart_callback: RestartCallback
) -> ConfigWatcher:
    """Start a ``ConfigWatcher`` in the default executor and return it."""
    watcher = ConfigWatcher(config_file, restart_callback)
    await asyncio.get_running_loop().run_in_executor(None, watcher.start)
    return watcher
