"""The ``sass`` executable.

Besides compiling one stylesheet, ``sass`` can run an interactive
SassScript shell (``-i``) or keep a set of ``SOURCE[:DEST]`` mappings
compiled (``--update`` once, ``--watch`` continuously).
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping

from hamlsass.cli.console import out
from hamlsass.cli.dispatcher import (
    InvocationOptions,
    OptionLayer,
    Tool,
    add_flag,
    configure_common,
    configure_single_file,
    resolve_single_file,
    set_engine_option,
    set_option,
    store_option,
)
from hamlsass.cli.reporter import ConsoleReporter
from hamlsass.cli.streams import Endpoint
from hamlsass.core.diagnostics import describe_line
from hamlsass.core.locations import build_mappings, validate_pairing
from hamlsass.core.protocols import StylesheetEngine, WatchObserver
from hamlsass.core.watcher import DEFAULT_POLL_INTERVAL, StylesheetWatcher
from hamlsass.exceptions import EngineError, EngineSyntaxError, UsageError
from hamlsass.infra.libsass_engine import OUTPUT_STYLES


def _add_load_path(options: InvocationOptions, path: str) -> None:
    options.engine_options.setdefault("load_paths", []).append(path)


def configure_sass(parser: argparse.ArgumentParser) -> None:
    """Flags specific to the ``sass`` executable."""
    add_flag(
        parser, "--watch",
        callback=set_option("watch"),
        help="Watch files or directories for changes. The location of the "
             "generated CSS can be set using a colon: "
             "sass --watch input.sass:output.css, "
             "sass --watch input-dir:output-dir",
    )
    add_flag(
        parser, "--update",
        callback=set_option("update"),
        help="Compile files or directories to CSS. Locations are set like --watch.",
    )
    add_flag(
        parser, "-t", "--style",
        callback=set_engine_option("style"),
        metavar="NAME",
        choices=OUTPUT_STYLES,
        help="Output style. Can be nested (default), compact, compressed, or expanded.",
    )
    add_flag(
        parser, "-l", "--line-numbers", "--line-comments",
        callback=set_engine_option("line_numbers", True),
        help="Emit comments in the generated CSS indicating the corresponding sass line.",
    )
    add_flag(
        parser, "-i", "--interactive",
        callback=set_option("interactive"),
        help="Run an interactive SassScript shell.",
    )
    add_flag(
        parser, "-I", "--load-path",
        callback=_add_load_path,
        metavar="PATH",
        help="Add a sass import path.",
    )
    add_flag(
        parser, "--cache-location",
        callback=set_engine_option("cache_location"),
        metavar="PATH",
        help="The path to put cached Sass files. Defaults to .sass-cache.",
    )
    add_flag(
        parser, "-C", "--no-cache",
        callback=set_engine_option("cache", False),
        help="Don't cache to sassc files.",
    )
    add_flag(
        parser, "--scss",
        callback=set_engine_option("syntax", "scss"),
        help="Parse input as SCSS regardless of its file extension.",
    )
    add_flag(
        parser, "--sass",
        callback=set_engine_option("syntax", "sass"),
        help="Parse input as indented Sass regardless of its file extension.",
    )
    add_flag(
        parser, "--poll-interval",
        callback=store_option("poll_interval"),
        metavar="SECONDS",
        type=float,
        help=f"Seconds between scans in --watch mode (default {DEFAULT_POLL_INTERVAL}).",
    )


class SassTool(Tool):
    """Compile Sass/SCSS to CSS."""

    name = "sass"
    description = (
        "Description:\n"
        "  Uses the Sass engine to parse the specified template\n"
        "  and outputs the result to the specified file."
    )

    def __init__(
        self,
        engine: StylesheetEngine | None = None,
        observer: WatchObserver | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._engine = engine
        self.observer: WatchObserver = observer or ConsoleReporter()
        self._environ = os.environ if environ is None else environ

    @property
    def engine(self) -> StylesheetEngine:
        if self._engine is None:
            from hamlsass.infra.libsass_engine import LibSassEngine

            self._engine = LibSassEngine()
        return self._engine

    def new_options(self) -> InvocationOptions:
        options = InvocationOptions()
        search_path = self._environ.get("SASSPATH", "")
        options.engine_options["load_paths"] = [
            ".", *(p for p in search_path.split(os.pathsep) if p),
        ]
        return options

    def option_layers(self) -> tuple[OptionLayer, ...]:
        return (configure_single_file, configure_common, configure_sass)

    # ------------------------------------------------------------------
    # Processing steps
    # ------------------------------------------------------------------

    def process(self, options: InvocationOptions) -> None:
        split_location_argument(options)
        if options.interactive:
            self.interactive(options)
            return
        if options.watch or options.update:
            self.watch_or_update(options)
            return
        source, target = resolve_single_file(options)
        self.compile(options, source, target)

    def compile(self, options: InvocationOptions, source: Endpoint, target: Endpoint) -> None:
        try:
            if source.is_file and source.path and not options.check_syntax:
                css = self.engine.compile_file(source.path, options.engine_options)
            else:
                # Syntax checking happens alongside compilation, which has
                # no side effects, so -c needs no special handling here.
                css = self.engine.compile_string(source.read(), options.engine_options)
        except EngineSyntaxError as exc:
            if options.trace:
                raise
            raise EngineError(
                f"Syntax error on line {describe_line(exc)} of "
                f"{options.filename or 'standard input'}: {exc.reason}",
            ) from exc
        finally:
            source.close()

        target.write(css)
        target.close()

    def interactive(self, options: InvocationOptions) -> None:
        from hamlsass.cli.repl import SassRepl

        SassRepl(self.engine, options.engine_options).run()

    def watch_or_update(self, options: InvocationOptions) -> None:
        flag = "--update" if options.update else "--watch"
        if not options.paths:
            raise UsageError(f"{flag} needs at least one file or directory")
        validate_pairing(options.paths, flag)
        directories, files = build_mappings(options.paths)

        watcher = StylesheetWatcher(
            self.engine,
            self.observer,
            engine_options=options.engine_options,
            unix_newlines=options.unix_newlines,
            interval=self.poll_interval(options),
        )
        if options.update:
            watcher.update(directories + files)
            return

        out.print(">>> Sass is watching for changes. Press Ctrl-C to stop.")
        try:
            watcher.watch(directories + files)
        except KeyboardInterrupt:
            return

    def poll_interval(self, options: InvocationOptions) -> float:
        if options.poll_interval is not None:
            interval = options.poll_interval
        else:
            raw = self._environ.get("SASS_POLL_INTERVAL")
            try:
                interval = float(raw) if raw else DEFAULT_POLL_INTERVAL
            except ValueError:
                raise UsageError(f"SASS_POLL_INTERVAL is not a number: {raw}") from None
        if interval <= 0:
            raise UsageError(f"poll interval must be positive, got {interval}")
        return interval


def split_location_argument(options: InvocationOptions) -> None:
    """Apply ``SOURCE:DEST`` notation outside of watch/update mode.

    A single ``in.scss:out.css`` argument becomes an input/output pair;
    several arguments starting with such a pair imply ``--update``.
    """
    if options.watch or options.update or not options.paths:
        return
    if ":" not in options.paths[0]:
        return
    if len(options.paths) == 1:
        options.paths = options.paths[0].split(":", 1)
    else:
        options.update = True
