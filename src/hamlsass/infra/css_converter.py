"""CSS to Sass translation behind :class:`~hamlsass.core.protocols.Converter`.

libsass does the parsing: the input is compiled as SCSS in ``expanded``
style, which both validates it (syntax errors carry a line number) and
normalises it to one declaration per line.  The normalised CSS is then
rewritten into indented Sass.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from hamlsass.infra.libsass_engine import import_sass, map_compile_error

_INDENT = "  "


def _statements(css: str) -> Iterator[str]:
    """Yield the logical lines of expanded CSS, joining multi-line comments."""
    pending: list[str] = []
    for raw in css.splitlines():
        line = raw.strip()
        if pending:
            pending.append(line)
            if "*/" in line:
                yield " ".join(pending)
                pending = []
            continue
        if line.startswith("/*") and "*/" not in line:
            pending.append(line)
            continue
        if line:
            yield line


def _declaration(statement: str, *, old: bool) -> str:
    body = statement.rstrip(";").strip()
    if body.startswith("@"):
        return body
    name, _, value = body.partition(":")
    if old:
        return f":{name.strip()} {value.strip()}"
    return f"{name.strip()}: {value.strip()}"


def css_to_sass(css: str, *, old: bool = False) -> str:
    """Rewrite normalised (expanded) CSS as indented Sass."""
    lines: list[str] = []
    depth = 0
    for statement in _statements(css):
        if statement.endswith("{"):
            if depth == 0 and lines:
                lines.append("")
            lines.append(_INDENT * depth + statement[:-1].strip())
            depth += 1
        elif statement == "}":
            depth = max(depth - 1, 0)
        elif statement.startswith("/*"):
            lines.append(_INDENT * depth + statement)
        else:
            lines.append(_INDENT * depth + _declaration(statement, old=old))
    return "\n".join(lines) + "\n" if lines else ""


class CssToSassConverter:
    """Concrete :class:`Converter` for ``css2sass``.

    Recognised options: ``old`` (emit ``:prop val``) and ``filename``.
    """

    def render(self, source: str, options: Mapping[str, Any]) -> str:
        sass = import_sass()
        try:
            css = sass.compile(string=source, output_style="expanded")
        except sass.CompileError as exc:
            raise map_compile_error(exc, options.get("filename") or "stdin") from exc
        return css_to_sass(css, old=bool(options.get("old")))
