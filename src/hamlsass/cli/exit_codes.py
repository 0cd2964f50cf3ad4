"""Process exit statuses shared by all four executables.

:class:`~hamlsass.cli.dispatcher.Dispatcher` is the only code that turns
an outcome into one of these numbers.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, including ``--help``, ``--version`` and a stopped watch."""

GENERAL_ERROR: int = 1
"""A failure or a Ctrl+C outside watch mode was reported on stderr."""
