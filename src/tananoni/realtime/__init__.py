"""Live reload: the browser client, connected sessions, and the watch loop.

Submodules are imported directly (``tananoni.realtime.watch``) so that
rendering a page does not pull in watchdog.
"""
