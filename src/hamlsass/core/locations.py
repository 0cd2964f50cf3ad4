"""Mapping of ``SOURCE[:DEST]`` arguments to template/stylesheet paths.

Each argument is parsed once into a :class:`~hamlsass.core.models.Location`
and never re-interpreted afterwards.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from hamlsass.core.models import Location, LocationKind
from hamlsass.exceptions import UsageError

TEMPLATE_SUFFIXES: tuple[str, ...] = (".sass", ".scss")
STYLESHEET_SUFFIX = ".css"


def is_partial(path: str | os.PathLike[str]) -> bool:
    """Partials (``_name.scss``) are imported, never compiled on their own."""
    return Path(path).name.startswith("_")


def stylesheet_path_for(source: str) -> str:
    """Default destination: *source* with its suffix replaced by ``.css``."""
    return str(Path(source).with_suffix(STYLESHEET_SUFFIX))


def parse_location(argument: str) -> Location:
    """Interpret one ``SOURCE[:DEST]`` command-line argument.

    A directory without a destination compiles in place; a file without
    one compiles next to itself.
    """
    source, sep, destination = argument.partition(":")
    kind = LocationKind.DIRECTORY if os.path.isdir(source) else LocationKind.FILE
    if not sep or not destination:
        destination = source if kind is LocationKind.DIRECTORY else stylesheet_path_for(source)
    return Location(source=source, destination=destination, kind=kind)


def build_mappings(
    arguments: Sequence[str],
) -> tuple[list[Location], list[Location]]:
    """Parse every argument and partition into ``(directories, files)``."""
    directories: list[Location] = []
    files: list[Location] = []
    for argument in arguments:
        location = parse_location(argument)
        (directories if location.is_directory else files).append(location)
    return directories, files


def validate_pairing(arguments: Sequence[str], flag: str) -> None:
    """Reject the ``sass --watch in.scss out.css`` mistake.

    When a second argument is given and the first is not a ``SOURCE:DEST``
    pair, the second must itself be an existing, non-CSS template.
    """
    if len(arguments) < 2 or ":" in arguments[0]:
        return
    second = arguments[1]
    if not os.path.exists(second):
        problem = "doesn't exist"
    elif second.endswith(STYLESHEET_SUFFIX):
        problem = "is a CSS file"
    else:
        return
    raise UsageError(
        f"File {second} {problem}.\n"
        f"  Did you mean: sass {flag} {arguments[0]}:{second}",
    )


def iter_templates(directory: str) -> Iterator[Path]:
    """Yield every template beneath *directory*, partials included."""
    root = Path(directory)
    yield from sorted(
        path
        for suffix in TEMPLATE_SUFFIXES
        for path in root.rglob(f"*{suffix}")
        if path.is_file()
    )


def destination_for(location: Location, template: str | os.PathLike[str]) -> str:
    """Where the stylesheet compiled from *template* under *location* goes."""
    if not location.is_directory:
        return location.destination
    relative = Path(template).relative_to(location.source)
    return str(Path(location.destination) / relative.with_suffix(STYLESHEET_SUFFIX))
