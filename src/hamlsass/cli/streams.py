"""Input/output endpoint resolution shared by every executable.

An :class:`Endpoint` is one of three things: a file this layer opened
(and therefore must close), a standard stream, or an in-memory buffer.
Only the first kind is ever closed here.
"""

from __future__ import annotations

import enum
import io
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from hamlsass.exceptions import UsageError

if TYPE_CHECKING:
    from hamlsass.cli.dispatcher import InvocationOptions


class EndpointKind(enum.Enum):
    FILE = "file"
    STANDARD_STREAM = "standard stream"
    BUFFER = "buffer"


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A resolved input or output channel."""

    kind: EndpointKind
    stream: TextIO
    path: str | None = None

    @classmethod
    def stdin(cls) -> Endpoint:
        return cls(EndpointKind.STANDARD_STREAM, sys.stdin)

    @classmethod
    def stdout(cls) -> Endpoint:
        return cls(EndpointKind.STANDARD_STREAM, sys.stdout)

    @classmethod
    def buffer(cls, initial: str = "") -> Endpoint:
        return cls(EndpointKind.BUFFER, io.StringIO(initial))

    @property
    def is_file(self) -> bool:
        return self.kind is EndpointKind.FILE

    def read(self) -> str:
        return self.stream.read()

    def write(self, text: str) -> None:
        self.stream.write(text)
        if not self.is_file:
            self.stream.flush()

    def getvalue(self) -> str:
        """Return everything written so far to a buffer endpoint."""
        if self.kind is not EndpointKind.BUFFER:
            raise TypeError(f"{self.kind.value} endpoints have no buffered value")
        return self.stream.getvalue()  # type: ignore[attr-defined]

    def close(self) -> None:
        """Close the underlying file; a no-op for streams and buffers."""
        if self.is_file and not self.stream.closed:
            self.stream.close()


def open_endpoint(
    path: str | None,
    mode: str = "r",
    *,
    unix_newlines: bool = False,
) -> Endpoint | None:
    """Open *path* as a file endpoint, or return ``None`` for no path.

    Output files opened with *unix_newlines* are written without newline
    translation.  :class:`OSError` from :func:`open` propagates unchanged.
    """
    if path is None:
        return None
    newline = "\n" if unix_newlines and "w" in mode else None
    stream = open(path, mode, encoding="utf-8", newline=newline)
    return Endpoint(EndpointKind.FILE, stream, path)


def resolve_streams(options: InvocationOptions) -> tuple[Endpoint, Endpoint]:
    """Fill ``options.input``/``options.output`` from the positional paths.

    With ``--stdin`` the first path names the output.  Otherwise the
    first two paths are input and output and the first is also recorded
    as ``options.filename``.  Standard streams fill whatever is left.
    Returns the resolved (input, output) pair.
    """
    paths = list(options.paths or ())
    if options.input is not None:
        output_path = paths[0] if paths else None
        extra = paths[1:]
    else:
        input_path = paths[0] if paths else None
        output_path = paths[1] if len(paths) > 1 else None
        extra = paths[2:]
    if extra:
        raise UsageError(f"unexpected argument: {extra[0]}")

    if options.input is None:
        options.filename = input_path
        options.input = open_endpoint(input_path) or Endpoint.stdin()
    if options.output is None:
        options.output = (
            open_endpoint(output_path, "w", unix_newlines=options.unix_newlines)
            or Endpoint.stdout()
        )
    return options.input, options.output
