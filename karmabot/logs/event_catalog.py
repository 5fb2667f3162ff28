"""Human readable templates for ``BotLogger`` events, keyed by (domain, action)."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from string import Formatter

TEMPLATE_RESOURCE = "event_templates.json"

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def load_templates(text: str) -> dict[tuple[str, str], str]:
    """Flatten ``{"domain": {"action": "template"}}`` JSON into a lookup table.

    Entries whose value is not a string are skipped.

    Raises:
        ValueError: If ``text`` is not JSON or its root is not an object.
    """
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("event templates root must be an object")
    return {
        (domain, action): template
        for domain, actions in document.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


def template_fields(template: str) -> set[str]:
    """Names of the ``{placeholders}`` used by ``template``."""
    return {name for _, name, _, _ in Formatter().parse(template) if name}


def reload_event_templates() -> None:
    """Re-read the packaged template file in place."""
    try:
        text = Path(__file__).with_name(TEMPLATE_RESOURCE).read_text(encoding="utf-8")
        templates = load_templates(text)
    except (OSError, ValueError) as e:
        logging.error(f"Event templates unavailable, using derived text: {e}")
        templates = {}
    EVENT_TEMPLATES.clear()
    EVENT_TEMPLATES.update(templates)


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "load_templates", "reload_event_templates", "template_fields"]
