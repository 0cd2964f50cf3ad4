"""Default watch/update observer: one colour-coded line per event.

Stylesheet events print as right-aligned action names (``create``,
``overwrite``, ``delete``, ``directory``, ``error``) followed by the
path; template events print as ``>>>`` progress lines.  Colour is
suppressed by :mod:`hamlsass.cli.console` when stdout is not a terminal.
"""

from __future__ import annotations

from hamlsass.cli.console import out
from hamlsass.core.diagnostics import describe_line
from hamlsass.core.models import EventKind, WatchEvent
from hamlsass.exceptions import EngineError

ACTION_COLORS: dict[EventKind, str] = {
    EventKind.STYLESHEET_CREATED: "green",
    EventKind.STYLESHEET_OVERWRITTEN: "yellow",
    EventKind.STYLESHEET_DELETED: "yellow",
    EventKind.DIRECTORY_CREATED: "green",
    EventKind.COMPILATION_ERROR: "red",
}

TEMPLATE_MESSAGES: dict[EventKind, str] = {
    EventKind.TEMPLATE_MODIFIED: "Change detected to",
    EventKind.TEMPLATE_CREATED: "New template detected",
    EventKind.TEMPLATE_DELETED: "Deleted template detected",
}


def format_action(event: WatchEvent) -> str:
    """Render the ``%11s %s`` action line for a stylesheet-side event."""
    argument = event.path
    if isinstance(event.error, EngineError):
        reason = getattr(event.error, "reason", None) or str(event.error)
        argument = f"{event.path} (Line {describe_line(event.error)}: {reason})"
    elif event.error is not None:
        argument = f"{event.path} ({event.error})"
    return f"{event.kind.value:>11} {argument}"


class ConsoleReporter:
    """Print every :class:`WatchEvent` to stdout."""

    def __call__(self, event: WatchEvent) -> None:
        message = TEMPLATE_MESSAGES.get(event.kind)
        if message is not None:
            out.print(f">>> {message}: {event.path}")
            return
        out.print(format_action(event), style=ACTION_COLORS[event.kind])
