"""Protocols (interfaces) for the external compiler engines.

These define the contracts that infrastructure adapters must satisfy.
CLI and core code depend ONLY on these protocols, never on a concrete
library, so tests can substitute lightweight fakes.

Every implementation must map library exceptions to
:class:`~hamlsass.exceptions.EngineError` (or its syntax subclass) and
a missing library to
:class:`~hamlsass.exceptions.MissingDependencyError`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from hamlsass.core.models import WatchEvent


class StylesheetEngine(Protocol):
    """Contract for the Sass compiler backend.

    Recognised ``options`` keys: ``style``, ``line_numbers``,
    ``load_paths``, ``syntax`` (``"sass"`` or ``"scss"``), ``filename``,
    ``cache`` and ``cache_location``.  Unknown keys are ignored.
    """

    def compile_string(self, source: str, options: Mapping[str, Any]) -> str:
        """Compile stylesheet source text to CSS.

        Raises
        ------
        EngineSyntaxError
            When the source does not parse.
        EngineError
            For any other compilation failure.
        """
        ...  # pragma: no cover

    def compile_file(self, path: str, options: Mapping[str, Any]) -> str:
        """Compile the stylesheet at *path*, resolving imports beside it."""
        ...  # pragma: no cover


class CompiledTemplate(Protocol):
    """A parsed template, ready to render."""

    @property
    def precompiled(self) -> str:
        """Engine-internal form, printed by ``haml --debug``."""
        ...  # pragma: no cover

    def render(self) -> str:
        ...  # pragma: no cover


class TemplateEngine(Protocol):
    """Contract for the Haml compiler backend."""

    def parse(self, source: str, options: Mapping[str, Any]) -> CompiledTemplate:
        """Parse Haml source; raising here means the syntax is invalid."""
        ...  # pragma: no cover


class Converter(Protocol):
    """Contract for the ``html2haml`` and ``css2sass`` translators."""

    def render(self, source: str, options: Mapping[str, Any]) -> str:
        ...  # pragma: no cover


WatchObserver = Callable[[WatchEvent], None]
"""Receives every event the watcher emits."""
