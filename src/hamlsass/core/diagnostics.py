"""Best-effort source line attribution for engine failures."""

from __future__ import annotations

import re
import traceback

from hamlsass.exceptions import EngineError, EngineSyntaxError

_LINE_RE = re.compile(r":(\d+)")


def location_trace(exc: BaseException) -> str | None:
    """Return ``"file:line"`` for where *exc* was raised, if known."""
    if isinstance(exc, EngineError) and exc.location:
        return exc.location
    # adapters re-raise library errors; the original raise site is the cause
    origin = exc.__cause__ or exc
    frames = traceback.extract_tb(origin.__traceback__)
    if not frames:
        return None
    innermost = frames[-1]
    return f"{innermost.filename}:{innermost.lineno}"


def get_line(exc: BaseException) -> str | None:
    """Find the template line on which *exc* was raised.

    Syntax errors carry the position in their message; everything else
    is located through its location trace.  The first integer following
    a colon wins.  Returns ``None`` instead of raising when no line can
    be found.
    """
    text = str(exc) if isinstance(exc, EngineSyntaxError) else location_trace(exc)
    if not text:
        return None
    match = _LINE_RE.search(text)
    return match.group(1) if match else None


def describe_line(exc: BaseException) -> str:
    return get_line(exc) or "?"
