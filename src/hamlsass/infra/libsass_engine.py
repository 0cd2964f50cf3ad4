"""libsass backed implementation of :class:`~hamlsass.core.protocols.StylesheetEngine`.

This module and :mod:`hamlsass.infra.css_converter` are the only places
in the codebase that import ``sass``.  ``sass.CompileError`` is caught
here and re-raised as :class:`~hamlsass.exceptions.EngineSyntaxError`;
nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from hamlsass.exceptions import EngineError, EngineSyntaxError, MissingDependencyError

OUTPUT_STYLES: tuple[str, ...] = ("nested", "expanded", "compact", "compressed")

# libsass reports "        on line 3:7 of src/main.scss"
_POSITION_RE = re.compile(r"on line (\d+)(?::\d+)? of (.+?)\s*$", re.MULTILINE)


def import_sass() -> Any:
    """Import libsass lazily so ``--help`` works without it."""
    try:
        import sass
    except ModuleNotFoundError as exc:
        raise MissingDependencyError("libsass") from exc
    return sass


def map_compile_error(exc: Exception, default_source: str) -> EngineSyntaxError:
    """Translate a ``sass.CompileError`` message into an engine error."""
    raw: object = exc.args[0] if exc.args else ""
    message = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else str(raw)
    lines = message.strip().splitlines()
    reason = lines[0].removeprefix("Error: ").strip() if lines else "compilation failed"
    match = _POSITION_RE.search(message)
    if match is None:
        return EngineSyntaxError(reason, source=default_source)
    return EngineSyntaxError(reason, source=match.group(2), line=int(match.group(1)))


class LibSassEngine:
    """Concrete :class:`StylesheetEngine` backed by libsass-python.

    Usage::

        engine = LibSassEngine()
        css = engine.compile_string("a { b { color: red } }", {"style": "compact"})
    """

    @staticmethod
    def _build_kwargs(options: Mapping[str, Any]) -> dict[str, Any]:
        """Translate hamlsass engine options into ``sass.compile`` kwargs."""
        style = options.get("style", "nested")
        if style not in OUTPUT_STYLES:
            raise EngineError(
                f"Unknown output style: {style}",
                hint=f"Choose one of: {', '.join(OUTPUT_STYLES)}",
            )
        kwargs: dict[str, Any] = {"output_style": style}
        load_paths = [str(p) for p in options.get("load_paths", ())]
        if load_paths:
            kwargs["include_paths"] = load_paths
        if options.get("line_numbers"):
            kwargs["source_comments"] = True
        # cache and cache_location have no libsass counterpart: libsass
        # recompiles from source every time.
        return kwargs

    @staticmethod
    def _is_indented(options: Mapping[str, Any]) -> bool:
        syntax = options.get("syntax")
        if syntax is None:
            filename = options.get("filename") or ""
            syntax = "sass" if Path(filename).suffix == ".sass" else "scss"
        return syntax == "sass"

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def compile_string(self, source: str, options: Mapping[str, Any]) -> str:
        """Compile *source*; ``options["syntax"]`` or the filename picks the syntax."""
        sass = import_sass()
        kwargs = self._build_kwargs(options)
        filename = options.get("filename")
        if filename:
            kwargs["include_paths"] = [
                str(Path(filename).parent), *kwargs.get("include_paths", ()),
            ]
        try:
            return sass.compile(string=source, indented=self._is_indented(options), **kwargs)
        except sass.CompileError as exc:
            raise map_compile_error(exc, filename or "stdin") from exc

    def compile_file(self, path: str, options: Mapping[str, Any]) -> str:
        """Compile the file at *path*; the ``.sass`` suffix selects indented syntax."""
        sass = import_sass()
        kwargs = self._build_kwargs(options)
        if not Path(path).is_file():
            raise EngineError(f"File to read not found or unreadable: {path}")
        if options.get("syntax") and Path(path).suffix not in (".sass", ".scss"):
            # libsass only honours indented syntax by suffix in filename mode
            with open(path, encoding="utf-8") as fh:
                return self.compile_string(fh.read(), dict(options, filename=path))
        try:
            return sass.compile(filename=path, **kwargs)
        except sass.CompileError as exc:
            raise map_compile_error(exc, path) from exc
