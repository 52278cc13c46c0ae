"""Static file serving for the generated site.

Serves the output directory over raw ASGI with automatic index file
resolution. Resolves symlinks and verifies the final path stays inside
the directory to prevent path traversal.
"""

import mimetypes
from pathlib import Path
from urllib.parse import unquote

import anyio

from tananoni._internal.asgi import Receive, Scope, Send


class StaticFiles:
    """ASGI app that serves files from ``directory``.

    Usage::

        static = StaticFiles("dist", cache_control="no-cache")
        await static(scope, receive, send)
    """

    __slots__ = ("_cache_control", "_directory", "_index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        method = scope.get("method", "GET")
        if method not in ("GET", "HEAD"):
            await _respond(send, 405, b"Method Not Allowed", headers=[(b"allow", b"GET, HEAD")])
            return

        path = unquote(scope.get("path", "/"))
        relative = path.lstrip("/")

        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            await _respond(send, 403, b"Forbidden")
            return

        # Directory: redirect to the trailing-slash URL, then serve its index
        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                await _respond(send, 404, b"Not Found")
                return
            if not path.endswith("/"):
                await _respond(send, 301, b"", headers=[(b"location", (path + "/").encode())])
                return
            file_path = index_path

        if not file_path.is_file():
            await _respond(send, 404, b"Not Found")
            return

        body = await anyio.Path(file_path).read_bytes()
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"
        elif content_type.startswith("text/") or content_type == "application/javascript":
            content_type += "; charset=utf-8"

        await _respond(
            send,
            200,
            b"" if method == "HEAD" else body,
            content_type=content_type,
            headers=[(b"cache-control", self._cache_control.encode())],
            content_length=len(body),
        )


async def _respond(
    send: Send,
    status: int,
    body: bytes,
    *,
    content_type: str = "text/plain; charset=utf-8",
    headers: list[tuple[bytes, bytes]] | None = None,
    content_length: int | None = None,
) -> None:
    length = len(body) if content_length is None else content_length
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [
                (b"content-type", content_type.encode()),
                (b"content-length", str(length).encode()),
                *(headers or []),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})
