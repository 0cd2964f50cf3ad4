"""Watch/update driver for the ``sass`` executable.

The watcher owns a fixed set of :class:`~hamlsass.core.models.Location`
mappings.  ``update`` compiles every template once; ``watch`` does the
same and then polls forever, recompiling whatever changed.

Guarantees
----------
* A template that fails to compile (engine error or unreadable file)
  becomes a ``COMPILATION_ERROR`` event; the pass always continues.
* Every event goes to the single observer given at construction.
* No terminal output; reporting is the observer's job.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, NoReturn

from hamlsass.core.locations import destination_for, is_partial, iter_templates
from hamlsass.core.models import EventKind, Location, WatchEvent
from hamlsass.core.protocols import StylesheetEngine, WatchObserver
from hamlsass.exceptions import EngineError

DEFAULT_POLL_INTERVAL: float = 1.0
"""Seconds between two scans in watch mode."""

# path -> (mtime_ns, size)
Snapshot = dict[str, tuple[int, int]]


class StylesheetWatcher:
    """Compile mapped templates once, or keep them compiled.

    Parameters
    ----------
    engine:
        Any object satisfying :class:`StylesheetEngine`.
    observer:
        Callable receiving every :class:`WatchEvent`.
    engine_options:
        Passed through to the engine; ``filename`` is set per template.
    unix_newlines:
        Write stylesheets without newline translation.
    interval:
        Seconds to sleep between scans in :meth:`watch`.
    sleep:
        Injectable replacement for :func:`time.sleep`.
    """

    def __init__(
        self,
        engine: StylesheetEngine,
        observer: WatchObserver,
        *,
        engine_options: Mapping[str, Any] | None = None,
        unix_newlines: bool = False,
        interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._engine = engine
        self._observer = observer
        self._engine_options: dict[str, Any] = dict(engine_options or {})
        self._newline = "\n" if unix_newlines else None
        self._interval = interval
        self._sleep = sleep
        self._locations: list[Location] = []
        self._snapshot: Snapshot = {}
        self._owners: dict[str, Location] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, locations: Sequence[Location]) -> None:
        """Compile every template of *locations* once."""
        self._locations = list(locations)
        for location, template in self._compilable():
            self.compile(location, template)
        self._snapshot = self._scan()

    def watch(self, locations: Sequence[Location]) -> NoReturn:
        """Run :meth:`update`, then poll until interrupted."""
        self.update(locations)
        while True:
            self._sleep(self._interval)
            self.poll()

    def poll(self) -> list[WatchEvent]:
        """Scan once, emit template events and recompile what changed.

        Returns the template events emitted by this scan.
        """
        previous, previous_owners = self._snapshot, self._owners
        current = self._scan()
        self._snapshot = current

        modified = sorted(p for p in current.keys() & previous.keys() if current[p] != previous[p])
        created = sorted(current.keys() - previous.keys())
        deleted = sorted(previous.keys() - current.keys())

        events = [WatchEvent(EventKind.TEMPLATE_MODIFIED, p) for p in modified]
        events += [WatchEvent(EventKind.TEMPLATE_CREATED, p) for p in created]
        events += [WatchEvent(EventKind.TEMPLATE_DELETED, p) for p in deleted]
        for event in events:
            self._observer(event)

        for path in modified + created:
            self._recompile(self._owners[path], path)
        for path in deleted:
            if not is_partial(path):
                self._remove_stylesheet(destination_for(previous_owners[path], path))
        return events

    def compile(self, location: Location, template: str) -> bool:
        """Compile one template to its destination; ``False`` on failure."""
        destination = destination_for(location, template)
        options = dict(self._engine_options, filename=template)
        try:
            css = self._engine.compile_file(template, options)
            self._ensure_directory(Path(destination).parent)
            existed = os.path.exists(destination)
            with open(destination, "w", encoding="utf-8", newline=self._newline) as fh:
                fh.write(css)
        except (EngineError, OSError) as exc:
            self._observer(WatchEvent(EventKind.COMPILATION_ERROR, template, exc))
            return False
        kind = EventKind.STYLESHEET_OVERWRITTEN if existed else EventKind.STYLESHEET_CREATED
        self._observer(WatchEvent(kind, destination))
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _compilable(self) -> Iterator[tuple[Location, str]]:
        for location in self._locations:
            if location.is_directory:
                for template in iter_templates(location.source):
                    if not is_partial(template):
                        yield location, str(template)
            else:
                yield location, location.source

    def _recompile(self, location: Location, template: str) -> None:
        # A partial has no stylesheet of its own; rebuild its siblings.
        if location.is_directory and is_partial(template):
            for owner, dependent in self._compilable():
                if owner is location:
                    self.compile(owner, dependent)
        else:
            self.compile(location, template)

    def _scan(self) -> Snapshot:
        snapshot: Snapshot = {}
        owners: dict[str, Location] = {}
        for location in self._locations:
            if location.is_directory:
                candidates = [str(t) for t in iter_templates(location.source)]
            else:
                candidates = [location.source]
            for path in candidates:
                try:
                    stat = os.stat(path)
                except OSError:
                    continue
                snapshot[path] = (stat.st_mtime_ns, stat.st_size)
                owners[path] = location
        self._owners = owners
        return snapshot

    def _ensure_directory(self, directory: Path) -> None:
        missing: list[Path] = []
        while str(directory) not in ("", ".") and not directory.exists():
            missing.append(directory)
            directory = directory.parent
        for path in reversed(missing):
            path.mkdir()
            self._observer(WatchEvent(EventKind.DIRECTORY_CREATED, str(path)))

    def _remove_stylesheet(self, stylesheet: str) -> None:
        try:
            os.remove(stylesheet)
        except FileNotFoundError:
            return
        self._observer(WatchEvent(EventKind.STYLESHEET_DELETED, stylesheet))
