"""hamlpy backed implementation of :class:`~hamlsass.core.protocols.TemplateEngine`.

The ``hamlpy`` package comes from the django-hamlpy distribution, an
optional dependency (``pip install hamlsass[haml]``).  It is imported
lazily; a missing installation surfaces as
:class:`~hamlsass.exceptions.MissingDependencyError` only when a
template is actually compiled.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from hamlsass.exceptions import EngineError, EngineSyntaxError, MissingDependencyError

_LINE_RE = re.compile(r"line (\d+)", re.IGNORECASE)

DEFAULT_FORMAT = "xhtml"


def _import_compiler() -> tuple[type[Any], type[Exception]]:
    try:
        from hamlpy.compiler import Compiler
        from hamlpy.parser.core import ParseException
    except ModuleNotFoundError as exc:
        raise MissingDependencyError("django-hamlpy") from exc
    return Compiler, ParseException


def _compiler_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Map hamlsass engine options onto hamlpy's ``Options``.

    hamlpy names its formats the same way and defaults to html5, so the
    format is always passed, falling back to xhtml.
    """
    result: dict[str, Any] = {"format": options.get("format") or DEFAULT_FORMAT}
    if "attr_wrapper" in options:
        result["attr_wrapper"] = options["attr_wrapper"]
    if options.get("escape_html"):
        result["escape_attrs"] = True
    # "ugly" output is hamlpy's only output; nothing to map.
    return result


@dataclass(frozen=True, slots=True)
class HamlPyTemplate:
    """Result of a successful hamlpy compilation."""

    html: str
    precompiled: str

    def render(self) -> str:
        return self.html


class HamlPyEngine:
    """Concrete :class:`TemplateEngine` backed by hamlpy."""

    def parse(self, source: str, options: Mapping[str, Any]) -> HamlPyTemplate:
        """Compile *source*; a parse failure raises :class:`EngineSyntaxError`."""
        compiler_class, parse_exception = _import_compiler()
        filename = options.get("filename") or "(haml)"
        compiler_options = _compiler_options(options)
        try:
            html = compiler_class(compiler_options).process(source)
            tree = compiler_class(dict(compiler_options, debug_tree=True)).process(source)
        except parse_exception as exc:
            match = _LINE_RE.search(str(exc))
            raise EngineSyntaxError(
                str(exc), source=filename, line=int(match.group(1)) if match else None,
            ) from exc
        except Exception as exc:
            raise EngineError(str(exc)) from exc
        return HamlPyTemplate(html=html, precompiled=tree)
