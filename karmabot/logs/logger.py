"""Event logger used by the connection core."""

from __future__ import annotations

import logging

from ..logging_config import debug_enabled
from .event_catalog import EVENT_TEMPLATES, template_fields

PREFIX_WIDTH = 20
EVENT_COLUMN_WIDTH = 28


class BotLogger:
    """Formats ``(domain, action)`` events into one log line each.

    ``user`` and ``channel`` keyword arguments form the bracketed prefix; every
    other keyword is context for the template and, in debug mode, is appended
    as ``k=v`` pairs after an event name column. Handlers come from
    ``LoggerConfigurator``.
    """

    def __init__(self, name: str = "karmabot") -> None:
        self.logger = logging.getLogger(name)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        user: str | None = None,
        channel: str | None = None,
        exc_info: bool = False,
        **context: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        text = human if human is not None else self.describe(domain, action, context)
        prefix = self._prefix(user, channel)
        if debug_enabled():
            line = self._debug_line(f"{domain}_{action}".lower(), prefix, text, context)
        else:
            line = f"{prefix} {text}"
        self.logger.log(level, line, exc_info=exc_info)

    @staticmethod
    def describe(domain: str, action: str, context: dict[str, object]) -> str:
        """Render the catalog template, or derive text from the event name.

        A template whose placeholders are not all present in ``context`` is
        returned unformatted.
        """
        template = EVENT_TEMPLATES.get((domain, action))
        if template is None:
            return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
        if not template_fields(template) <= context.keys():
            return template
        try:
            return template.format(**context)
        except (IndexError, ValueError):
            return template

    @staticmethod
    def _prefix(user: str | None, channel: str | None) -> str:
        label = (user or "system") + (channel or "")
        return f"[{label.ljust(PREFIX_WIDTH)[:PREFIX_WIDTH]}]"

    @staticmethod
    def _debug_line(
        event_name: str, prefix: str, text: str, context: dict[str, object]
    ) -> str:
        if len(event_name) > EVENT_COLUMN_WIDTH:
            event_name = event_name[: EVENT_COLUMN_WIDTH - 1] + "…"
        line = f"{event_name.ljust(EVENT_COLUMN_WIDTH)} {prefix} {text}"
        if context:
            line += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        return line


logger = BotLogger()
