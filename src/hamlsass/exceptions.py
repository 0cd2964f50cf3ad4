"""Custom exception hierarchy for hamlsass.

Every failure the command-line layer reports on its own terms inherits
from :class:`HamlSassError`.  Raw third-party exceptions (e.g. from
libsass or hamlpy) must never propagate beyond the infrastructure layer
except under ``--trace``; they are caught and re-raised as a typed
subclass defined here.  Filesystem failures stay the builtin
:class:`OSError`, whose message already names the offending path.

Hierarchy
---------
HamlSassError
├── UsageError
├── EngineError
│   └── EngineSyntaxError
└── MissingDependencyError
"""

from __future__ import annotations


TRACE_HINT = "Use --trace for backtrace."


class HamlSassError(Exception):
    """Base exception for all hamlsass errors.

    The dispatcher prints ``str(exc)`` and, when present, the hint on the
    following line, then exits with status 1.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class UsageError(HamlSassError):
    """Raised for unrecognised flags, malformed values, or bad arguments."""


# --- Engines ---------------------------------------------------------------

class EngineError(HamlSassError):
    """Raised when a compiler engine fails on otherwise valid input.

    ``location`` is the engine's location trace (``"file:line"``) when
    the engine reports one; line attribution falls back to it.
    """

    def __init__(
        self,
        message: str,
        *,
        location: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.location: str | None = location


class EngineSyntaxError(EngineError):
    """Raised when a template or stylesheet cannot be parsed.

    The message embeds the position as ``source:line: reason`` so the
    line can be recovered from the text alone; ``reason`` keeps the bare
    engine description.
    """

    def __init__(
        self,
        reason: str,
        *,
        source: str = "-",
        line: int | None = None,
    ) -> None:
        message = f"{source}:{line}: {reason}" if line is not None else reason
        location = f"{source}:{line}" if line is not None else None
        super().__init__(message, location=location)
        self.reason: str = reason
        self.source: str = source
        self.line: int | None = line


# --- Environment -----------------------------------------------------------

class MissingDependencyError(HamlSassError):
    """Raised when an optional library needed by a tool is not installed."""

    def __init__(self, dependency: str) -> None:
        super().__init__(
            f"Required dependency {dependency} not found!",
            hint=TRACE_HINT,
        )
        self.dependency: str = dependency
