"""Page descriptors and HTML rendering."""

from tananoni.pages.renderer import render_html
from tananoni.pages.types import Asset, HtmlPage, Link, MountPoint, Script, ScriptOnly, Unit

__all__ = [
    "Asset",
    "HtmlPage",
    "Link",
    "MountPoint",
    "Script",
    "ScriptOnly",
    "Unit",
    "render_html",
]
