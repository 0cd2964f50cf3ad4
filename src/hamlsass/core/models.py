"""Domain models for the watch/update subsystem.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependencies
on external packages.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from hamlsass.exceptions import HamlSassError


# ---------------------------------------------------------------------------
# Source → destination mapping
# ---------------------------------------------------------------------------

class LocationKind(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class Location:
    """One ``SOURCE[:DEST]`` argument, interpreted exactly once."""

    source: str
    """Template file or directory being watched."""

    destination: str
    """Stylesheet file, or directory mirroring ``source``."""

    kind: LocationKind

    @property
    def is_directory(self) -> bool:
        return self.kind is LocationKind.DIRECTORY


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

class EventKind(enum.Enum):
    TEMPLATE_MODIFIED = "template modified"
    TEMPLATE_CREATED = "template created"
    TEMPLATE_DELETED = "template deleted"
    STYLESHEET_OVERWRITTEN = "overwrite"
    STYLESHEET_CREATED = "create"
    STYLESHEET_DELETED = "delete"
    DIRECTORY_CREATED = "directory"
    COMPILATION_ERROR = "error"


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """Something the watcher did or noticed.

    ``path`` is the template for ``TEMPLATE_*`` and ``COMPILATION_ERROR``
    events, the stylesheet for ``STYLESHEET_*`` events and the new
    directory for ``DIRECTORY_CREATED``.
    """

    kind: EventKind
    path: str
    error: HamlSassError | OSError | None = None
