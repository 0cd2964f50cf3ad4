"""Core layer: source/destination mapping, watch/update and diagnostics.

Rules
-----
* No terminal output; events go to an observer.
* No imports from ``cli`` or ``infra``.
* Engines are reached only through :mod:`hamlsass.core.protocols`.
"""

from hamlsass.core.models import EventKind, Location, LocationKind, WatchEvent
from hamlsass.core.protocols import (
    CompiledTemplate,
    Converter,
    StylesheetEngine,
    TemplateEngine,
    WatchObserver,
)
from hamlsass.core.watcher import StylesheetWatcher

__all__: list[str] = [
    "CompiledTemplate",
    "Converter",
    "EventKind",
    "Location",
    "LocationKind",
    "StylesheetEngine",
    "StylesheetWatcher",
    "TemplateEngine",
    "WatchEvent",
    "WatchObserver",
]
