from __future__ import annotations

import json
import logging
import os
from typing import Any

Fingerprint = tuple[float, int]


class ConfigRepository:
    """Reads the JSON configuration file.

    The parsed document is reused while the file's (mtime, size) fingerprint
    is unchanged, so the watcher can reload on every filesystem event.
    """

    def __init__(self, path: str | os.PathLike[str]):
        if not isinstance(path, str | os.PathLike):
            raise TypeError("config path must be a str or os.PathLike")
        self.path = os.fspath(path)
        self._fingerprint: Fingerprint | None = None
        self._document: dict[str, Any] = {}

    def _current_fingerprint(self) -> Fingerprint:
        st = os.stat(self.path)
        return st.st_mtime, st.st_size

    def load_raw(self) -> dict[str, Any]:
        """Return the parsed JSON object.

        A missing file, unreadable JSON or a non-object root all yield ``{}``;
        the last two are logged.
        """
        try:
            fingerprint = self._current_fingerprint()
        except FileNotFoundError:
            return {}
        except OSError as e:
            logging.error(f"📁 Cannot stat config file path={self.path} error={e}")
            return {}
        if fingerprint == self._fingerprint:
            return self._document

        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logging.error(f"📁 Config file unreadable path={self.path} error={e}")
            return {}
        if not isinstance(document, dict):
            logging.error(f"📁 Config root must be a JSON object path={self.path}")
            return {}
        self._fingerprint, self._document = fingerprint, document
        return document
