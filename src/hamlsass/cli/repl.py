"""``sass --interactive``: a small SassScript evaluation shell.

Expressions are evaluated by compiling them as the value of a throwaway
declaration; ``$name: value`` assignments are remembered and prepended
to every later evaluation.  Ctrl+C or Ctrl+D leaves the shell.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from hamlsass.cli.console import out
from hamlsass.core.protocols import StylesheetEngine
from hamlsass.exceptions import EngineError, MissingDependencyError

_ASSIGNMENT_RE = re.compile(r"^\$([\w-]+)\s*:\s*(.+?);?$", re.DOTALL)
_VALUE_RE = re.compile(r"\{value:(.*)\}\s*$", re.DOTALL)


def _questionary_prompt() -> str | None:
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError("questionary") from exc
    try:
        return questionary.text(">>", qmark="").ask()  # None on Ctrl+C
    except EOFError:
        return None


class SassRepl:
    """Read-eval-print loop over a :class:`StylesheetEngine`."""

    def __init__(
        self,
        engine: StylesheetEngine,
        engine_options: Mapping[str, Any] | None = None,
        *,
        prompt: Callable[[], str | None] = _questionary_prompt,
    ) -> None:
        self._engine = engine
        self._options = dict(engine_options or {}, syntax="scss", style="compressed")
        self._options.pop("filename", None)
        self._prompt = prompt
        self._assignments: list[str] = []

    def run(self) -> None:
        while True:
            line = self._prompt()
            if line is None:
                return
            if line.strip():
                out.print(self.evaluate(line.strip()))

    def evaluate(self, text: str) -> str:
        """Evaluate one expression or assignment and return its value."""
        assignment = _ASSIGNMENT_RE.match(text)
        expression = assignment.group(2) if assignment else text.rstrip(";")
        try:
            value = self._evaluate_expression(expression)
        except EngineError as exc:
            return f"SyntaxError: {getattr(exc, 'reason', str(exc))}"
        if assignment:
            self._assignments.append(f"${assignment.group(1)}: {expression};")
        return value

    def _evaluate_expression(self, expression: str) -> str:
        source = "\n".join([*self._assignments, f"_repl {{ value: {expression}; }}"])
        css = self._engine.compile_string(source, self._options)
        match = _VALUE_RE.search(css.strip())
        return match.group(1) if match else "null"
