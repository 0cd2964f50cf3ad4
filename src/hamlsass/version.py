"""Single source of truth for the hamlsass version string."""

from __future__ import annotations

__version__: str = "2.2.0"
