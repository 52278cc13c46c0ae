"""Development server.

Starts a pounce ASGI server with the live ``DevApp`` object. Uses
single-worker mode; the dev app does its own watching, so pounce's
process reload stays off.
"""

import logging

from tananoni._internal.asgi import ASGIApp

logger = logging.getLogger("tananoni.server")


def run_dev_server(app: ASGIApp, host: str, port: int) -> None:
    """Start a pounce server for ``app`` and block until it stops.

    Pounce's ``run()`` takes an import string, but the dev app is a live
    object holding the route tree, so ``pounce.Server`` is used directly
    with the ASGI callable.

    Args:
        app: ASGI callable (usually a ``DevApp``).
        host: Bind host address.
        port: Bind port number.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1, reload=False)
    logger.info("serving on http://%s:%d", host, port)
    Server(config, app).run()
