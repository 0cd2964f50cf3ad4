"""Shared pytest fixtures and configuration for the hamlsass test suite.

Guidelines
----------
* Engines are faked at the protocol boundary unless a test is explicitly
  about an adapter; adapter tests ``importorskip`` their library.
* Filesystem work happens under ``tmp_path`` only.
* Tests must not depend on terminal state: colour is never emitted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from hamlsass.core.models import WatchEvent
from hamlsass.exceptions import EngineError, EngineSyntaxError


# ---------------------------------------------------------------------------
# Fake engines
# ---------------------------------------------------------------------------

class FakeStylesheetEngine:
    """Upper-cases its input; sources containing ``!bad`` fail to parse."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def compile_string(self, source: str, options: Mapping[str, Any]) -> str:
        self.calls.append(("string", source, dict(options)))
        return self._compile(source, options.get("filename") or "stdin")

    def compile_file(self, path: str, options: Mapping[str, Any]) -> str:
        self.calls.append(("file", path, dict(options)))
        try:
            source = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise EngineError(f"File to read not found or unreadable: {path}") from exc
        return self._compile(source, path)

    @staticmethod
    def _compile(source: str, filename: str) -> str:
        for number, line in enumerate(source.splitlines(), start=1):
            if "!bad" in line:
                raise EngineSyntaxError("Invalid CSS after \"!bad\"", source=filename, line=number)
        return source.upper()


@dataclass
class FakeTemplate:
    html: str
    precompiled: str = "_hamlout.push_text('')"

    def render(self) -> str:
        return self.html


class FakeTemplateEngine:
    """Wraps each line in ``<p>``; ``%bad`` on a line is a syntax error."""

    def __init__(self, render_error: Exception | None = None) -> None:
        self.render_error = render_error
        self.options: dict[str, Any] = {}

    def parse(self, source: str, options: Mapping[str, Any]) -> FakeTemplate:
        self.options = dict(options)
        for number, line in enumerate(source.splitlines(), start=1):
            if "%bad" in line:
                raise EngineSyntaxError("Illegal element", source="-", line=number)
        html = "".join(f"<p>{line}</p>\n" for line in source.splitlines())
        template = FakeTemplate(html)
        if self.render_error is not None:
            error = self.render_error

            def _fail() -> str:
                raise error

            template.render = _fail  # type: ignore[method-assign]
        return template


@dataclass
class FakeConverter:
    output: str = "converted\n"
    error: Exception | None = None
    seen: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def render(self, source: str, options: Mapping[str, Any]) -> str:
        self.seen.append((source, dict(options)))
        if self.error is not None:
            raise self.error
        return self.output


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list[WatchEvent] = []

    def __call__(self, event: WatchEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [event.kind.value for event in self.events]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def stylesheet_engine() -> FakeStylesheetEngine:
    return FakeStylesheetEngine()


@pytest.fixture
def template_engine() -> FakeTemplateEngine:
    return FakeTemplateEngine()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture(autouse=True)
def _plain_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TERM", raising=False)
    monkeypatch.delenv("SASSPATH", raising=False)
    monkeypatch.delenv("SASS_POLL_INTERVAL", raising=False)
