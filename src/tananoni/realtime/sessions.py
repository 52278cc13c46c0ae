"""Connected live-reload sessions.

The registry is owned by the dev app and passed to the reload
coordinator; there is no module-level socket set. Each socket handler
adds its session on connect and discards it on disconnect. Broadcasting
sends to a snapshot of the members, so sessions may come and go while a
broadcast is in progress.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Protocol

from tananoni._internal.asgi import Send
from tananoni.realtime.client import REFRESH_TOKEN

logger = logging.getLogger("tananoni.server")


class SessionClosed(Exception):
    """The browser went away before a message could be delivered."""


class Session(Protocol):
    """Anything that can push a text frame to one browser."""

    async def send_text(self, text: str) -> None: ...


class WebSocketSession:
    """A live-reload socket on top of an ASGI ``send`` callable."""

    __slots__ = ("_closed", "_send", "client")

    def __init__(self, send: Send, client: tuple[str, int] | None = None) -> None:
        self._send = send
        self._closed = False
        self.client = client

    def __repr__(self) -> str:
        return f"WebSocketSession(client={self.client!r}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        self._closed = True

    async def send_text(self, text: str) -> None:
        if self._closed:
            raise SessionClosed(repr(self))
        try:
            await self._send({"type": "websocket.send", "text": text})
        except (OSError, RuntimeError) as exc:
            # Server already tore the connection down
            self._closed = True
            raise SessionClosed(repr(self)) from exc


class SessionRegistry:
    """The set of browsers currently listening for reloads."""

    __slots__ = ("_sessions",)

    def __init__(self) -> None:
        self._sessions: set[Session] = set()

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(tuple(self._sessions))

    def __contains__(self, session: object) -> bool:
        return session in self._sessions

    def add(self, session: Session) -> None:
        self._sessions.add(session)
        logger.debug("reload session connected (%d open)", len(self._sessions))

    def discard(self, session: Session) -> None:
        self._sessions.discard(session)
        logger.debug("reload session closed (%d open)", len(self._sessions))

    async def broadcast(self, token: str = REFRESH_TOKEN) -> int:
        """Send ``token`` to every session present when the broadcast starts.

        A session that closes mid-broadcast is skipped; it is not removed
        here, its own disconnect handler does that. Returns the number of
        sessions that received the token.
        """
        delivered = 0
        for session in tuple(self._sessions):
            try:
                await session.send_text(token)
            except SessionClosed:
                logger.debug("skipped closed session %r", session)
                continue
            delivered += 1
        logger.info("sent %r to %d session(s)", token, delivered)
        return delivered
