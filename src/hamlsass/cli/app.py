"""Console-script entry points and ``python -m hamlsass`` routing.

Each executable is one :class:`~hamlsass.cli.dispatcher.Tool` driven by
a :class:`~hamlsass.cli.dispatcher.Dispatcher`; the dispatcher is the
error boundary, so the functions here only pick the tool.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

from hamlsass.cli import exit_codes
from hamlsass.cli.console import console
from hamlsass.cli.converter_tools import Css2SassTool, Html2HamlTool
from hamlsass.cli.dispatcher import Dispatcher, Tool
from hamlsass.cli.haml_tool import HamlTool
from hamlsass.cli.sass_tool import SassTool


TOOLS: dict[str, Callable[[], Tool]] = {
    "haml": HamlTool,
    "sass": SassTool,
    "html2haml": Html2HamlTool,
    "css2sass": Css2SassTool,
}


# ---------------------------------------------------------------------------
# Console scripts
# ---------------------------------------------------------------------------

def haml() -> None:
    Dispatcher(HamlTool()).run()


def sass() -> None:
    Dispatcher(SassTool()).run()


def html2haml() -> None:
    Dispatcher(Html2HamlTool()).run()


def css2sass() -> None:
    Dispatcher(Css2SassTool()).run()


# ---------------------------------------------------------------------------
# python -m hamlsass
# ---------------------------------------------------------------------------

def main(argv: Sequence[str] | None = None) -> int:
    """Run the tool named by the first argument.

    Parameters
    ----------
    argv:
        ``[TOOL, *ARGS]``.  When ``None`` (default), ``sys.argv[1:]`` is
        used.

    Returns
    -------
    int
        OS process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in TOOLS:
        console.print(f"usage: python -m hamlsass {{{','.join(TOOLS)}}} [options] [INPUT] [OUTPUT]")
        return exit_codes.GENERAL_ERROR
    return Dispatcher(TOOLS[args[0]]()).main(args[1:])


def cli() -> None:
    sys.exit(main())
