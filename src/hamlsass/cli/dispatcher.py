"""Option parsing and dispatch shared by every hamlsass executable.

This module is the **sole error boundary** for all four tools.  A run
goes through the same linear stages every time:

1. Parse ``argv`` with a parser assembled from the tool's option layers.
   Each flag mutates :class:`InvocationOptions` through a callback.
2. Hand the options to the tool's ``process`` step, which resolves its
   streams, calls the engine and writes the result.
3. Catch any failure exactly once: re-raise it under ``--trace``,
   otherwise print its message to stderr and exit with status 1.

Option layers are plain callables applied in order, so the layering
``common -> single file -> leaf`` is explicit at each tool's definition
instead of hidden in an override chain.
"""

from __future__ import annotations

import argparse
import os
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, NoReturn

from hamlsass.cli import exit_codes
from hamlsass.cli.console import console
from hamlsass.cli.streams import Endpoint, resolve_streams
from hamlsass.exceptions import UsageError
from hamlsass.version import __version__


# ---------------------------------------------------------------------------
# Invocation state
# ---------------------------------------------------------------------------

@dataclass
class InvocationOptions:
    """Mutable record accumulated while parsing one invocation.

    Instances double as the :mod:`argparse` namespace, so option
    callbacks receive them directly.
    """

    input: Endpoint | None = None
    output: Endpoint | None = None
    filename: str | None = None
    trace: bool = False
    unix_newlines: bool = False
    engine_options: dict[str, Any] = field(default_factory=dict)
    # None until parsed: intermixed parsing drops a positional whose
    # namespace value is already an empty list
    paths: list[str] | None = None

    # single-file compilers
    check_syntax: bool = False

    # sass
    watch: bool = False
    update: bool = False
    interactive: bool = False
    poll_interval: float | None = None

    # haml
    requires: list[str] = field(default_factory=list)
    load_paths: list[str] = field(default_factory=list)
    debug: bool = False

    # converters
    no_erb: bool = False
    module_options: dict[str, Any] = field(default_factory=dict)

    def close_endpoints(self) -> None:
        """Close any file endpoints; streams and buffers are left open."""
        for endpoint in (self.input, self.output):
            if endpoint is not None:
                endpoint.close()


# ---------------------------------------------------------------------------
# Parser plumbing
# ---------------------------------------------------------------------------

OptionCallback = Callable[[InvocationOptions, Any], None]
OptionLayer = Callable[[argparse.ArgumentParser], None]


class OptionParser(argparse.ArgumentParser):
    """Argument parser that reports problems as :class:`UsageError`."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{self.prog}: {message}")


class CallbackAction(argparse.Action):
    """Invoke ``callback(options, value)`` when the flag is seen."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        callback: OptionCallback,
        nargs: int | str | None = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            option_strings, dest, nargs=nargs, default=argparse.SUPPRESS, **kwargs,
        )
        self.callback = callback

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        self.callback(namespace, None if values == [] else values)  # type: ignore[arg-type]


def add_flag(
    parser: argparse.ArgumentParser,
    *flags: str,
    callback: OptionCallback,
    help: str,
    metavar: str | None = None,
    **kwargs: Any,
) -> None:
    """Register a flag; it takes a value exactly when *metavar* is given."""
    if metavar is not None:
        kwargs.update(nargs=None, metavar=metavar)
    parser.add_argument(*flags, action=CallbackAction, callback=callback, help=help, **kwargs)


def set_option(name: str, value: Any = True) -> OptionCallback:
    """Callback that stores a constant on the options record."""

    def _callback(options: InvocationOptions, _value: Any) -> None:
        setattr(options, name, value)

    return _callback


def store_option(name: str) -> OptionCallback:
    """Callback that stores the flag's argument on the options record."""

    def _callback(options: InvocationOptions, value: Any) -> None:
        setattr(options, name, value)

    return _callback


def set_engine_option(name: str, value: Any = None) -> OptionCallback:
    """Callback that stores *value* (or the flag's argument) for the engine."""

    def _callback(options: InvocationOptions, flag_value: Any) -> None:
        options.engine_options[name] = flag_value if value is None else value

    return _callback


# ---------------------------------------------------------------------------
# Option layers
# ---------------------------------------------------------------------------

def _read_stdin(options: InvocationOptions, _value: Any) -> None:
    options.input = Endpoint.stdin()


def configure_common(parser: argparse.ArgumentParser) -> None:
    """Flags available to every executable."""
    add_flag(
        parser, "-s", "--stdin",
        callback=_read_stdin,
        help="Read input from standard input instead of an input file",
    )
    add_flag(
        parser, "--trace",
        callback=set_option("trace"),
        help="Show a full traceback on error",
    )
    if os.name == "nt":
        add_flag(
            parser, "--unix-newlines",
            callback=set_option("unix_newlines"),
            help="Use Unix-style newlines in written files.",
        )


def _install_rails(options: InvocationOptions, directory: str) -> None:
    from hamlsass.cli.rails import install_rails_plugin

    install_rails_plugin(directory)
    raise SystemExit(exit_codes.SUCCESS)


def _check_syntax(options: InvocationOptions, _value: Any) -> None:
    options.check_syntax = True
    options.output = Endpoint.buffer()


def configure_single_file(parser: argparse.ArgumentParser) -> None:
    """Flags shared by the ``haml`` and ``sass`` compilers."""
    add_flag(
        parser, "--rails",
        callback=_install_rails,
        metavar="RAILS_DIR",
        help="Install Haml and Sass from the Gem to a Rails project",
    )
    add_flag(
        parser, "-c", "--check",
        callback=_check_syntax,
        help="Just check syntax, don't evaluate.",
    )


def resolve_single_file(options: InvocationOptions) -> tuple[Endpoint, Endpoint]:
    """Shared first processing step of the ``haml`` and ``sass`` compilers."""
    streams = resolve_streams(options)
    if options.filename:
        options.engine_options["filename"] = options.filename
    return streams


def _configure_tail(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument(
        "-?", "-h", "--help", action="help", help="Show this message",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"Haml/Sass {__version__}",
        help="Print version",
    )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

class Tool(ABC):
    """Abstract base class for the hamlsass executables."""

    name: str
    description: str
    usage: str = "%(prog)s [options] [INPUT] [OUTPUT]"

    def new_options(self) -> InvocationOptions:
        """Return the empty options record for one invocation."""
        return InvocationOptions()

    @abstractmethod
    def option_layers(self) -> tuple[OptionLayer, ...]:
        """Option layers applied in order when building the parser."""

    @abstractmethod
    def process(self, options: InvocationOptions) -> None:
        """Run the tool against fully parsed options."""


class Dispatcher:
    """Drive one tool through parse, process and error handling."""

    def __init__(self, tool: Tool) -> None:
        self.tool = tool

    def build_parser(self) -> OptionParser:
        parser = OptionParser(
            prog=self.tool.name,
            usage=self.tool.usage,
            description=self.tool.description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            add_help=False,
        )
        for layer in self.tool.option_layers():
            layer(parser)
        _configure_tail(parser)
        return parser

    def parse(
        self,
        argv: Sequence[str],
        options: InvocationOptions | None = None,
    ) -> InvocationOptions:
        """Parse *argv* into *options*, or into fresh options when omitted."""
        if options is None:
            options = self.tool.new_options()
        self.build_parser().parse_intermixed_args(list(argv), namespace=options)
        return options

    def main(self, argv: Sequence[str] | None = None) -> int:
        """Run the tool and return the process exit code.

        ``SystemExit`` raised by ``--help``, ``--version`` or a tool is
        never treated as a failure and propagates untouched.
        """
        args = list(sys.argv[1:] if argv is None else argv)
        options = self.tool.new_options()
        try:
            self.parse(args, options)
            self.tool.process(options)
        except KeyboardInterrupt:
            if options.trace:
                raise
            console.print("Aborted by user.")
            return exit_codes.GENERAL_ERROR
        except Exception as exc:  # noqa: BLE001
            if options.trace:
                raise
            report_error(exc)
            return exit_codes.GENERAL_ERROR
        finally:
            options.close_endpoints()
        return exit_codes.SUCCESS

    def run(self, argv: Sequence[str] | None = None) -> NoReturn:
        """Run the tool and terminate the process with its exit code."""
        sys.exit(self.main(argv))


def report_error(exc: BaseException) -> None:
    """Write the one-line summary of *exc* (and its hint) to stderr."""
    console.print(str(exc))
    hint = getattr(exc, "hint", None)
    if hint:
        console.print(f"  {hint}")
