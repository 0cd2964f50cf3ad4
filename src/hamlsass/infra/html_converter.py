"""HTML to Haml translation behind :class:`~hamlsass.core.protocols.Converter`.

Parsing uses the standard library: the forgiving :mod:`html.parser` by
default, or the strict :mod:`xml.etree.ElementTree` parser for
``--xhtml``.  ERb tags are swapped for placeholder elements before
parsing and come back out as ``=`` and ``-`` lines.
"""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Union
from xml.etree import ElementTree

from hamlsass.exceptions import EngineSyntaxError

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

_LOUD = "haml-loud"
_SILENT = "haml-silent"
_ERB_RE = re.compile(r"<%(=?)(.*?)-?%>", re.DOTALL)
_IDENT_RE = re.compile(r"^[\w-]+$")
_BLOCK_OPENER_RE = re.compile(
    r"^(if|unless|case|while|until|for|begin)\b|\bdo(\s*\|[^|]*\|)?\s*$",
)
_BLOCK_CONTINUATION_RE = re.compile(r"^(else|elsif|when|rescue|ensure)\b")
_HAML_SPECIAL = ("%", ".", "#", "-", "=", "!", "/", "~", "&", "\\")


@dataclass
class Element:
    tag: str
    attrs: list[tuple[str, str | None]] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    code: str | None = None
    """Ruby code of an ERb placeholder element."""


@dataclass
class Text:
    value: str


@dataclass
class Comment:
    value: str


@dataclass
class Doctype:
    value: str


Node = Union[Element, Text, Comment, Doctype]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _replace_erb(source: str) -> str:
    def _swap(match: re.Match[str]) -> str:
        tag = _LOUD if match.group(1) else _SILENT
        return f"<{tag}>{html.escape(match.group(2).strip())}</{tag}>"

    return _ERB_RE.sub(_swap, source)


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("root")
        self._stack: list[Element] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag, list(attrs))
        self._stack[-1].children.append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._stack[-1].children.append(Element(tag, list(attrs)))

    def handle_endtag(self, tag: str) -> None:
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return
        # stray end tag: ignored

    def handle_data(self, data: str) -> None:
        if data.strip():
            self._stack[-1].children.append(Text(data))

    def handle_comment(self, data: str) -> None:
        self._stack[-1].children.append(Comment(data))

    def handle_decl(self, decl: str) -> None:
        self._stack[-1].children.append(Doctype(decl))


def parse_html(source: str) -> Element:
    builder = _TreeBuilder()
    builder.feed(source)
    builder.close()
    return builder.root


def _from_etree(node: ElementTree.Element) -> Element:
    tag = node.tag.rsplit("}", 1)[-1] if isinstance(node.tag, str) else "div"
    element = Element(tag, [(k.rsplit("}", 1)[-1], v) for k, v in node.attrib.items()])
    if node.text and node.text.strip():
        element.children.append(Text(node.text))
    for child in node:
        element.children.append(_from_etree(child))
        if child.tail and child.tail.strip():
            element.children.append(Text(child.tail))
    return element


def parse_xhtml(source: str, filename: str) -> Element:
    try:
        document = ElementTree.fromstring(source)
    except ElementTree.ParseError as exc:
        line, _column = exc.position
        reason = str(exc).split(":", 1)[0]
        raise EngineSyntaxError(reason, source=filename, line=line) from exc
    root = Element("root")
    root.children.append(_from_etree(document))
    return root


def _nest_erb(element: Element) -> None:
    """Turn ERb placeholders into code nodes and nest their blocks.

    Siblings between a block opener (``if``, ``... do``) and its ``end``
    move under the opener; the ``end`` itself disappears.
    """
    nested: list[Node] = []
    stack: list[list[Node]] = [nested]
    for child in element.children:
        if not isinstance(child, Element):
            stack[-1].append(child)
            continue
        if child.tag in (_LOUD, _SILENT):
            child.code = "".join(c.value for c in child.children if isinstance(c, Text)).strip()
            child.children = []
        else:
            _nest_erb(child)
        code = child.code if child.tag == _SILENT else None
        if code is None:
            stack[-1].append(child)
            continue
        if code == "end":
            if len(stack) > 1:
                stack.pop()
            continue
        if _BLOCK_CONTINUATION_RE.match(code) and len(stack) > 1:
            stack.pop()
        stack[-1].append(child)
        if _BLOCK_OPENER_RE.search(code) or _BLOCK_CONTINUATION_RE.match(code):
            stack.append(child.children)
    element.children = nested


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _text_lines(value: str) -> list[str]:
    lines = []
    for line in value.strip().splitlines():
        line = line.strip()
        if not line:
            continue
        lines.append("\\" + line if line.startswith(_HAML_SPECIAL) else line)
    return lines


def _element_head(element: Element) -> str:
    attrs = dict(element.attrs)
    head = "" if element.tag == "div" else f"%{element.tag}"
    element_id = attrs.get("id")
    if element_id and _IDENT_RE.match(element_id):
        head += f"#{element_id}"
        del attrs["id"]
    classes = (attrs.get("class") or "").split()
    if classes and all(_IDENT_RE.match(c) for c in classes):
        head += "".join(f".{c}" for c in classes)
        del attrs["class"]
    if not head:
        head = "%div"
    if attrs:
        pairs = " ".join(
            name if value is None else f'{name}="{html.escape(value, quote=True)}"'
            for name, value in attrs.items()
        )
        head += f"({pairs})"
    return head


def _render(node: Node, depth: int, lines: list[str]) -> None:
    indent = "  " * depth
    if isinstance(node, Doctype):
        lines.append(indent + ("!!! 5" if node.value.strip().lower() == "doctype html" else "!!!"))
    elif isinstance(node, Comment):
        text = node.value.strip()
        if "\n" in text:
            lines.append(indent + "/")
            lines.extend(indent + "  " + line for line in _text_lines(text))
        else:
            lines.append(f"{indent}/ {text}")
    elif isinstance(node, Text):
        lines.extend(indent + line for line in _text_lines(node.value))
    elif node.code is not None:
        lines.append(f"{indent}{'=' if node.tag == _LOUD else '-'} {node.code}")
        for child in node.children:
            _render(child, depth + 1, lines)
    else:
        head = _element_head(node)
        children = node.children
        if node.tag in VOID_ELEMENTS:
            lines.append(indent + head + "/")
        elif len(children) == 1 and isinstance(children[0], Text) and len(_text_lines(children[0].value)) == 1:
            lines.append(f"{indent}{head} {_text_lines(children[0].value)[0]}")
        else:
            lines.append(indent + head)
            for child in children:
                _render(child, depth + 1, lines)


def html_to_haml(root: Element) -> str:
    lines: list[str] = []
    for child in root.children:
        _render(child, 0, lines)
    return "\n".join(lines) + "\n" if lines else ""


class HtmlToHamlConverter:
    """Concrete :class:`Converter` for ``html2haml``.

    Recognised options: ``erb``, ``xhtml`` and ``filename``.
    """

    def render(self, source: str, options: Mapping[str, Any]) -> str:
        erb = bool(options.get("erb"))
        if erb:
            source = _replace_erb(source)
        if options.get("xhtml"):
            root = parse_xhtml(source, options.get("filename") or "stdin")
        else:
            root = parse_html(source)
        if erb:
            _nest_erb(root)
        return html_to_haml(root)
