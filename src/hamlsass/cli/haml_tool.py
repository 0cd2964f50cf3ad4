"""The ``haml`` executable: compile one Haml template to HTML."""

from __future__ import annotations

import argparse
import importlib
import runpy
import sys

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
)
from hamlsass.core.diagnostics import describe_line
from hamlsass.core.protocols import TemplateEngine
from hamlsass.exceptions import (
    TRACE_HINT,
    EngineError,
    EngineSyntaxError,
    HamlSassError,
    MissingDependencyError,
)

TEMPLATE_FORMATS = ("xhtml", "html4", "html5")


def _set_style(options: InvocationOptions, name: str) -> None:
    if name == "ugly":
        options.engine_options["ugly"] = True


def _add_require(options: InvocationOptions, module: str) -> None:
    options.requires.append(module)


def _add_load_path(options: InvocationOptions, path: str) -> None:
    options.load_paths.append(path)


def configure_haml(parser: argparse.ArgumentParser) -> None:
    """Flags specific to the ``haml`` executable."""
    add_flag(
        parser, "-t", "--style",
        callback=_set_style,
        metavar="NAME",
        help="Output style. Can be indented (default) or ugly.",
    )
    add_flag(
        parser, "-f", "--format",
        callback=set_engine_option("format"),
        metavar="NAME",
        choices=TEMPLATE_FORMATS,
        help="Output format. Can be xhtml (default), html4, or html5.",
    )
    add_flag(
        parser, "-e", "--escape-html",
        callback=set_engine_option("escape_html", True),
        help="Escape HTML characters (like ampersands and angle brackets) by default.",
    )
    add_flag(
        parser, "-q", "--double-quote-attributes",
        callback=set_engine_option("attr_wrapper", '"'),
        help="Set attribute wrapper to double-quotes (default is single).",
    )
    add_flag(
        parser, "-r", "--require",
        callback=_add_require,
        metavar="FILE",
        help="Import a module (or run a .py file) before rendering.",
    )
    add_flag(
        parser, "-I", "--load-path",
        callback=_add_load_path,
        metavar="PATH",
        help="Add PATH to the module search path.",
    )
    add_flag(
        parser, "--debug",
        callback=set_option("debug"),
        help="Print out the precompiled template source.",
    )


def load_requirements(options: InvocationOptions) -> None:
    """Extend ``sys.path`` and import everything named with ``-r``."""
    for path in reversed(options.load_paths):
        sys.path.insert(0, path)
    for requirement in options.requires:
        if requirement.endswith(".py"):
            runpy.run_path(requirement)
        else:
            importlib.import_module(requirement)


class HamlTool(Tool):
    """Compile Haml templates to HTML."""

    name = "haml"
    description = (
        "Description:\n"
        "  Uses the Haml engine to parse the specified template\n"
        "  and outputs the result to the specified file."
    )

    def __init__(self, engine: TemplateEngine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> TemplateEngine:
        if self._engine is None:
            from hamlsass.infra.hamlpy_engine import HamlPyEngine

            self._engine = HamlPyEngine()
        return self._engine

    def option_layers(self) -> tuple[OptionLayer, ...]:
        return (configure_single_file, configure_common, configure_haml)

    def process(self, options: InvocationOptions) -> None:
        source, target = resolve_single_file(options)

        template = source.read()
        source.close()

        try:
            compiled = self.engine.parse(template, options.engine_options)
            if options.check_syntax:
                out.print("Syntax OK")
                return

            load_requirements(options)

            if options.debug:
                out.print(compiled.precompiled)
                out.print("=" * 100)

            result = compiled.render()
        except MissingDependencyError:
            raise
        except Exception as exc:
            if options.trace:
                raise
            raise classify_error(exc) from exc

        target.write(result)
        target.close()


def classify_error(exc: Exception) -> HamlSassError:
    """Turn a compilation or rendering failure into a reportable error."""
    line = describe_line(exc)
    if isinstance(exc, EngineSyntaxError):
        return EngineError(f"Syntax error on line {line}: {exc.reason}")
    if isinstance(exc, EngineError):
        return EngineError(f"Haml error on line {line}: {exc}")
    return HamlSassError(f"Exception on line {line}: {exc}", hint=TRACE_HINT)
