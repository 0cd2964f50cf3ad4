"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

Two proxies are exported: :data:`console` writes to stderr (failure
messages) and :data:`out` writes to stdout (watch-mode progress).
"""

from __future__ import annotations

import os
import sys
from typing import Any, TextIO

from hamlsass.exceptions import MissingDependencyError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``MissingDependencyError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise MissingDependencyError("rich") from exc
	return Console


def supports_color(stream: TextIO) -> bool:
	"""Whether ANSI colour should be emitted on *stream*.

	Almost any real Unix terminal supports colour, so this only filters
	out Windows consoles that do not set ``TERM`` and streams that are
	not ttys.
	"""
	if not os.environ.get("TERM"):
		return False
	isatty = getattr(stream, "isatty", None)
	try:
		return bool(isatty and isatty())
	except ValueError:
		# closed stream
		return False


def get_rich_console(*, stderr: bool = False) -> Any:
	"""Create a Rich console for stderr or stdout.

	Markup, emoji and highlighting are off: messages carry file paths and
	engine output that must be shown verbatim.
	"""
	console_class = _load_rich_console_class()
	stream = sys.stderr if stderr else sys.stdout
	return console_class(
		stderr=stderr,
		color_system="auto" if supports_color(stream) else None,
		markup=False,
		emoji=False,
		highlight=False,
		soft_wrap=True,
	)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object, style: str | None = None) -> None:
		"""Render with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except MissingDependencyError:
			print(*objects, file=sys.stderr if self._stderr else sys.stdout)
			return
		rich_console.print(*objects, style=style)


console = _ConsoleProxy(stderr=True)
out = _ConsoleProxy(stderr=False)
