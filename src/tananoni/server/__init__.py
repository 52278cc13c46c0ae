"""Development server: static files plus the live-reload socket."""

from tananoni.server.app import DevApp
from tananoni.server.dev import run_dev_server
from tananoni.server.static import StaticFiles

__all__ = ["DevApp", "StaticFiles", "run_dev_server"]
