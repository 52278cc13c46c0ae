"""File watching and the regenerate-then-refresh loop.

``watch_directory()`` turns watchdog's observer thread into an async
stream of ``ChangeEvent`` values. ``ReloadCoordinator`` consumes that
stream one event at a time:

1. Events arriving while it is cooling down are dropped, not queued.
2. A qualifying event (right kind, at least one path that is neither
   excluded nor of an unwatched type) switches it to cooling down.
3. After a short settle delay it awaits the regeneration callback.
4. Only a fully successful regeneration is followed by a ``refresh``
   broadcast, so browsers are never reloaded onto a broken build.
5. The cooldown window starts once the callback has finished.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import AsyncIterable, Awaitable, Callable, Collection, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import anyio
import anyio.to_thread
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from tananoni.build.engine import RouteOutcome
from tananoni.config import DevConfig
from tananoni.errors import WatchError
from tananoni.realtime.client import REFRESH_TOKEN
from tananoni.realtime.sessions import SessionRegistry

logger = logging.getLogger("tananoni.watch")


class ChangeKind(Enum):
    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    OTHER = "other"


QUALIFYING_KINDS = frozenset(
    {ChangeKind.CREATED, ChangeKind.MODIFIED, ChangeKind.REMOVED, ChangeKind.RENAMED}
)

_WATCHDOG_KINDS = {
    "created": ChangeKind.CREATED,
    "modified": ChangeKind.MODIFIED,
    "deleted": ChangeKind.REMOVED,
    "moved": ChangeKind.RENAMED,
}


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One filesystem notification and the paths it touched."""

    kind: ChangeKind
    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ChangeFilter:
    """Decides which events are worth a rebuild.

    A path is excluded when one of its parts equals an ``excludes``
    entry (``"dist"`` excludes everything under any ``dist`` directory,
    ``"build.py"`` excludes that file anywhere). An empty ``extensions``
    set accepts every suffix.
    """

    excludes: frozenset[str] = frozenset()
    extensions: frozenset[str] = frozenset()

    @classmethod
    def create(cls, excludes: Collection[str] = (), extensions: Collection[str] = ()) -> ChangeFilter:
        return cls(frozenset(excludes), frozenset(extensions))

    def accepts_path(self, path: str | os.PathLike[str]) -> bool:
        resolved = Path(path).resolve()
        if any(part in self.excludes for part in resolved.parts):
            return False
        return not self.extensions or resolved.suffix in self.extensions

    def qualifies(self, event: ChangeEvent) -> bool:
        if event.kind not in QUALIFYING_KINDS:
            return False
        return any(self.accepts_path(path) for path in event.paths)


class CoordinatorState(Enum):
    IDLE = "idle"
    COOLING_DOWN = "cooling-down"


Regenerate = Callable[[], Awaitable[object]]


class ReloadCoordinator:
    """Debounced regeneration plus reload broadcast.

    Usage::

        coordinator = ReloadCoordinator(site.generate, registry, change_filter=flt)
        async with watch_directory("src") as events:
            await coordinator.run(events)
    """

    __slots__ = (
        "_busy",
        "_cool_until",
        "change_filter",
        "cooldown",
        "regenerate",
        "regenerations",
        "sessions",
        "settle_delay",
        "token",
    )

    def __init__(
        self,
        regenerate: Regenerate,
        sessions: SessionRegistry,
        *,
        change_filter: ChangeFilter | None = None,
        settle_delay: float = 0.01,
        cooldown: float = 1.0,
        token: str = REFRESH_TOKEN,
    ) -> None:
        self.regenerate = regenerate
        self.sessions = sessions
        self.change_filter = change_filter or ChangeFilter()
        self.settle_delay = settle_delay
        self.cooldown = cooldown
        self.token = token
        self.regenerations = 0
        self._busy = False
        self._cool_until = 0.0

    @classmethod
    def from_config(
        cls, regenerate: Regenerate, sessions: SessionRegistry, config: DevConfig
    ) -> ReloadCoordinator:
        return cls(
            regenerate,
            sessions,
            change_filter=ChangeFilter.create(config.excludes, config.watch_extensions),
            settle_delay=config.settle_delay,
            cooldown=config.cooldown,
        )

    @property
    def state(self) -> CoordinatorState:
        if self._busy or time.monotonic() < self._cool_until:
            return CoordinatorState.COOLING_DOWN
        return CoordinatorState.IDLE

    async def run(self, events: AsyncIterable[ChangeEvent]) -> None:
        """Process ``events`` one at a time until the stream ends."""
        async for event in events:
            await self.dispatch(event)

    async def dispatch(self, event: ChangeEvent) -> bool:
        """Handle one event. Returns True if it triggered a regeneration."""
        if self.state is CoordinatorState.COOLING_DOWN:
            logger.debug("cooling down, dropped %s %s", event.kind.value, event.paths)
            return False
        if not self.change_filter.qualifies(event):
            return False

        self._busy = True
        try:
            logger.info("change detected: %s", ", ".join(event.paths))
            await anyio.sleep(self.settle_delay)
            if await self.rebuild():
                await self.sessions.broadcast(self.token)
        finally:
            self._busy = False
            self._cool_until = time.monotonic() + self.cooldown
        return True

    async def rebuild(self) -> bool:
        """Run the regeneration callback once. True if it fully succeeded."""
        self.regenerations += 1
        try:
            result = await self.regenerate()
        except Exception:
            logger.exception("regeneration failed, browsers not refreshed")
            return False

        if isinstance(result, Sequence):
            broken = [o for o in result if isinstance(o, RouteOutcome) and not o.ok]
            if broken:
                for outcome in broken:
                    for exc in outcome.errors:
                        logger.error("%s: %s", outcome.directory, exc)
                logger.warning(
                    "%d route(s) failed to build, browsers not refreshed", len(broken)
                )
                return False
        return True


# ------------------------------------------------------------------
# watchdog bridge
# ------------------------------------------------------------------


class _QueueHandler(FileSystemEventHandler):
    """Forwards watchdog events from the observer thread to the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[ChangeEvent]) -> None:
        super().__init__()
        self._loop = loop
        self._queue = queue

    def on_any_event(self, event: FileSystemEvent) -> None:
        kind = _WATCHDOG_KINDS.get(event.event_type, ChangeKind.OTHER)
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        self._loop.call_soon_threadsafe(self._queue.put_nowait, ChangeEvent(kind, tuple(paths)))


class DirectoryWatcher:
    """Async iterator over filesystem changes below one directory.

    Use as an async context manager; the observer thread runs between
    ``__aenter__`` and ``__aexit__``.
    """

    __slots__ = ("_observer", "_queue", "path", "recursive")

    def __init__(self, path: str | os.PathLike[str], *, recursive: bool = True) -> None:
        self.path = Path(path)
        self.recursive = recursive
        self._observer: Observer | None = None
        self._queue: asyncio.Queue[ChangeEvent] | None = None

    async def __aenter__(self) -> DirectoryWatcher:
        """Start the observer thread.

        Raises:
            WatchError: If the directory vanished or the OS refused the
                watch (inotify limits, permissions).
        """
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        handler = _QueueHandler(asyncio.get_running_loop(), queue)
        observer = Observer()
        try:
            observer.schedule(handler, str(self.path), recursive=self.recursive)
            observer.start()
        except OSError as exc:
            observer.stop()
            raise WatchError(str(self.path), exc.strerror or str(exc)) from exc
        self._queue = queue
        self._observer = observer
        logger.info("watching %s", self.path)
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._observer is not None:
            self._observer.stop()
            await anyio.to_thread.run_sync(self._observer.join)
            self._observer = None

    def __aiter__(self) -> DirectoryWatcher:
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._queue is None:
            msg = "DirectoryWatcher must be entered with 'async with' before iterating"
            raise RuntimeError(msg)
        return await self._queue.get()


def watch_directory(path: str | os.PathLike[str], *, recursive: bool = True) -> DirectoryWatcher:
    """Validate ``path`` and return a watcher for it.

    Raises:
        WatchError: If the directory does not exist or cannot be read.
    """
    root = Path(path)
    if not root.is_dir():
        raise WatchError(str(path), "not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise WatchError(str(path), "permission denied")
    return DirectoryWatcher(root, recursive=recursive)
