"""Template filters registered on every site Environment."""

import time as time_module
from datetime import UTC, datetime
from typing import Any

from kida.template import Markup
from patitas import Markdown

# Shared by every render.
_MARKDOWN = Markdown(plugins=["all"], highlight=False)

# Seconds per unit, largest first. A "month" is 30 days and a "year" 12 months.
_INCREMENTS: tuple[tuple[int, str], ...] = (
    (12 * 30 * 24 * 60 * 60, "year"),
    (30 * 24 * 60 * 60, "month"),
    (24 * 60 * 60, "day"),
    (60 * 60, "hour"),
    (60, "minute"),
    (1, "second"),
)


def _timestamp(value: Any) -> float:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, int | float):
        return float(value)
    else:
        moment = datetime.fromisoformat(str(value))
    # Store timestamps (SQLite CURRENT_TIMESTAMP) are naive UTC.
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.timestamp()


def time_ago(value: Any, now: float | None = None) -> str:
    """Describe how long ago a moment in the past was.

    Accepts unix timestamps, ``datetime`` objects, and ISO-formatted
    strings such as ``"2024-03-01 12:00:00"``.

    Example:
        {{ post.created_at | time_ago }}  → "3 hours ago"
    """
    if value is None or value == "":
        return ""
    current = time_module.time() if now is None else now
    delta = current - _timestamp(value)
    for seconds, unit in _INCREMENTS:
        count = int(delta // seconds)
        if count >= 1:
            return f"{count} {unit}{'s' if count > 1 else ''} ago"
    return "A moment ago"


def field_errors(errors: Any, field_name: str) -> list[str]:
    """Extract the messages for one form field from a ``{field: [messages]}`` dict.

    Example:
        {% for msg in errors | field_errors("username") %}
          <span class="error">{{ msg }}</span>
        {% end %}
    """
    if not errors or not isinstance(errors, dict):
        return []
    messages = errors.get(field_name)
    if not messages:
        return []
    if isinstance(messages, str):
        return [messages]
    return list(messages)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Pluralize a word based on count.

    Example:
        {{ replies | length | pluralize("reply", "replies") }}  → "5 replies"
    """
    word = singular if count == 1 else (plural or singular + "s")
    return f"{count} {word}"


def markdown(value: Any) -> Markup:
    """Render Markdown text to HTML.

    A ``<`` in the source is escaped before parsing, so raw HTML and
    angle-bracket autolinks render as text. Everything else is ordinary
    Markdown.

    Example:
        {{ article["content"] | markdown }}
    """
    if value is None or value == "":
        return Markup("")
    return Markup(_MARKDOWN(str(value).replace("<", "&lt;")))


SITE_FILTERS: dict[str, Any] = {
    "field_errors": field_errors,
    "markdown": markdown,
    "pluralize": pluralize,
    "time_ago": time_ago,
}
