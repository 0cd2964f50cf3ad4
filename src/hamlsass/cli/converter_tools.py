"""The ``html2haml`` and ``css2sass`` converter executables.

Both read one document, hand it to a :class:`~hamlsass.core.protocols.Converter`
together with their module options, and write the converted text.
"""

from __future__ import annotations

import argparse
import re
from abc import abstractmethod
from typing import Any

from hamlsass.cli.dispatcher import (
    InvocationOptions,
    OptionCallback,
    OptionLayer,
    Tool,
    add_flag,
    configure_common,
    set_option,
)
from hamlsass.cli.streams import resolve_streams
from hamlsass.core.diagnostics import describe_line
from hamlsass.core.protocols import Converter
from hamlsass.exceptions import TRACE_HINT, EngineError, EngineSyntaxError, MissingDependencyError

_ERB_PATH_RE = re.compile(r"\.(rhtml|erb)$")


def set_module_option(name: str, value: Any = True) -> OptionCallback:
    def _callback(options: InvocationOptions, _value: Any) -> None:
        options.module_options[name] = value

    return _callback


def _ignore(options: InvocationOptions, _value: Any) -> None:
    pass


class ConverterTool(Tool):
    """Shared processing for the format converters."""

    def __init__(self, converter: Converter | None = None) -> None:
        self._converter = converter

    @property
    def converter(self) -> Converter:
        if self._converter is None:
            self._converter = self.default_converter()
        return self._converter

    @abstractmethod
    def default_converter(self) -> Converter:
        """Build the converter used when none was injected."""

    def prepare(self, options: InvocationOptions) -> None:
        """Hook for adjusting module options once the streams are known."""

    def process(self, options: InvocationOptions) -> None:
        source, target = resolve_streams(options)
        self.prepare(options)
        if options.filename:
            options.module_options["filename"] = options.filename

        text = source.read()
        source.close()
        try:
            result = self.converter.render(text, options.module_options)
        except MissingDependencyError as exc:
            if options.trace and exc.__cause__ is not None:
                raise exc.__cause__
            raise
        except EngineError as exc:
            if options.trace:
                raise
            raise self.classify_error(exc) from exc

        target.write(result)
        target.close()

    def classify_error(self, exc: EngineError) -> EngineError:
        return EngineError(
            f"Syntax error on line {describe_line(exc)}: {getattr(exc, 'reason', exc)}",
            hint=TRACE_HINT,
        )


# ---------------------------------------------------------------------------
# html2haml
# ---------------------------------------------------------------------------

def configure_html2haml(parser: argparse.ArgumentParser) -> None:
    add_flag(
        parser, "-e", "--erb",
        callback=set_module_option("erb"),
        help="Parse ERb tags.",
    )
    add_flag(
        parser, "--no-erb",
        callback=set_option("no_erb"),
        help="Don't parse ERb tags.",
    )
    add_flag(
        parser, "-r", "--rhtml",
        callback=set_module_option("erb"),
        help="Deprecated; same as --erb.",
    )
    add_flag(
        parser, "--no-rhtml",
        callback=set_option("no_erb"),
        help="Deprecated; same as --no-erb.",
    )
    add_flag(
        parser, "-x", "--xhtml",
        callback=set_module_option("xhtml"),
        help="Parse the input using the more strict XHTML parser.",
    )


class Html2HamlTool(ConverterTool):
    """Convert HTML (optionally with ERb) to Haml."""

    name = "html2haml"
    description = "Description: Transforms an HTML file into corresponding Haml code."

    def default_converter(self) -> Converter:
        from hamlsass.infra.html_converter import HtmlToHamlConverter

        return HtmlToHamlConverter()

    def option_layers(self) -> tuple[OptionLayer, ...]:
        return (configure_html2haml, configure_common)

    def prepare(self, options: InvocationOptions) -> None:
        source = options.input
        if source is not None and source.is_file and _ERB_PATH_RE.search(source.path or ""):
            options.module_options.setdefault("erb", True)
        if options.no_erb:
            options.module_options["erb"] = False

    def classify_error(self, exc: EngineError) -> EngineError:
        kind = "Syntax error" if isinstance(exc, EngineSyntaxError) else "Error"
        return EngineError(
            f"{kind} on line {describe_line(exc)}: {getattr(exc, 'reason', exc)}",
        )


# ---------------------------------------------------------------------------
# css2sass
# ---------------------------------------------------------------------------

def configure_css2sass(parser: argparse.ArgumentParser) -> None:
    add_flag(
        parser, "--old",
        callback=set_module_option("old"),
        help='Output the old-style ":prop val" property syntax',
    )
    add_flag(
        parser, "-a", "--alternate",
        callback=_ignore,
        help="Ignored",
    )


class Css2SassTool(ConverterTool):
    """Convert CSS to indented Sass."""

    name = "css2sass"
    description = "Description: Transforms a CSS file into corresponding Sass code."

    def default_converter(self) -> Converter:
        from hamlsass.infra.css_converter import CssToSassConverter

        return CssToSassConverter()

    def option_layers(self) -> tuple[OptionLayer, ...]:
        return (configure_css2sass, configure_common)
