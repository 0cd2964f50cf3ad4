"""Allow ``python -m hamlsass TOOL [options]`` invocation.

The first argument names the executable (``haml``, ``sass``,
``html2haml`` or ``css2sass``); the rest is handed to it unchanged so
that ``python -m hamlsass sass in.scss`` behaves like ``sass in.scss``.
"""

from __future__ import annotations

from hamlsass.cli.app import cli

if __name__ == "__main__":
    cli()
