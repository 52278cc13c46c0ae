"""Development ASGI application.

Three jobs behind one ASGI callable:

- ``http``: serve the generated site from the output directory.
- ``websocket`` on the reload path: register the browser so it receives
  ``refresh`` after each successful rebuild.
- ``lifespan``: build once at startup, then run the watch loop until
  shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from tananoni._internal.asgi import Receive, Scope, Send
from tananoni.config import DevConfig
from tananoni.realtime.sessions import SessionRegistry, WebSocketSession
from tananoni.realtime.watch import Regenerate, ReloadCoordinator, watch_directory
from tananoni.server.static import StaticFiles

logger = logging.getLogger("tananoni.server")

# RFC 6455 policy violation
_CLOSE_POLICY_VIOLATION = 1008


class DevApp:
    """Serves a generated site and pushes live reloads.

    Usage::

        app = DevApp(site.generate, "dist", DevConfig(watch_dir="src"))
        run_dev_server(app, "127.0.0.1", 8000)
    """

    __slots__ = (
        "_exit_stack",
        "_watch_task",
        "build_on_startup",
        "config",
        "coordinator",
        "sessions",
        "static",
    )

    def __init__(
        self,
        regenerate: Regenerate,
        output_dir: str | Path,
        config: DevConfig | None = None,
        *,
        sessions: SessionRegistry | None = None,
        build_on_startup: bool = True,
    ) -> None:
        self.config = config or DevConfig()
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.coordinator = ReloadCoordinator.from_config(regenerate, self.sessions, self.config)
        self.static = StaticFiles(
            output_dir, index=self.config.index, cache_control=self.config.cache_control
        )
        self.build_on_startup = build_on_startup
        self._exit_stack: contextlib.AsyncExitStack | None = None
        self._watch_task: asyncio.Task[None] | None = None

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        match scope["type"]:
            case "lifespan":
                await self._handle_lifespan(receive, send)
            case "websocket":
                await self._handle_websocket(scope, receive, send)
            case "http":
                await self.static(scope, receive, send)
            case other:
                logger.debug("ignoring ASGI scope type %r", other)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _handle_websocket(self, scope: Scope, receive: Receive, send: Send) -> None:
        message = await receive()
        if message["type"] != "websocket.connect":
            return

        if scope.get("path") != self.config.reload_path:
            await send({"type": "websocket.close", "code": _CLOSE_POLICY_VIOLATION})
            return

        await send({"type": "websocket.accept"})
        client = scope.get("client")
        session = WebSocketSession(send, tuple(client) if client else None)
        self.sessions.add(session)
        try:
            while True:
                message = await receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            session.mark_closed()
            self.sessions.discard(session)

    # -- Watch loop --

    async def startup(self) -> None:
        """Build once, then start watching.

        The observer is running by the time this returns, so an unusable
        watch directory fails startup with ``WatchError``.
        """
        watcher = watch_directory(self.config.watch_dir)
        if self.build_on_startup:
            await self.coordinator.rebuild()

        stack = contextlib.AsyncExitStack()
        events = await stack.enter_async_context(watcher)
        self._exit_stack = stack
        self._watch_task = asyncio.create_task(self.coordinator.run(events))
        self._watch_task.add_done_callback(_report_watch_crash)

    async def shutdown(self) -> None:
        task, self._watch_task = self._watch_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                # Already reported by _report_watch_crash
                logger.debug("watch loop had stopped before shutdown", exc_info=True)

        stack, self._exit_stack = self._exit_stack, None
        if stack is not None:
            await stack.aclose()


def _report_watch_crash(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("watch loop crashed, live reload is off", exc_info=exc)
