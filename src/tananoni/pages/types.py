"""Page, script and asset descriptors.

Frozen dataclasses built through chainable ``.with_*()`` calls. Each
call returns a new value, so a descriptor handed to the generator can
never change underneath it.

A route holds two kinds of unit: ``HtmlPage`` (an HTML document plus its
bundler entry point) and ``ScriptOnly`` (just an entry point). The
generator matches on the type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import Literal, TypeAlias

MountKind: TypeAlias = Literal["div", "main", "header", "footer"]
LinkKind: TypeAlias = Literal["icon", "stylesheet"]
ScriptKind: TypeAlias = Literal["normal", "module"]

DEFAULT_VIEWPORT = "width=device-width, initial-scale=1.0"


@dataclass(frozen=True, slots=True)
class MountPoint:
    """An empty element the bundled script mounts into."""

    kind: MountKind
    id: str


@dataclass(frozen=True, slots=True)
class Link:
    """A ``<link>`` element in the document head."""

    kind: LinkKind
    href: str


@dataclass(frozen=True, slots=True)
class Script:
    """A ``<script>`` element. ``module`` scripts load as ES modules."""

    src: str
    kind: ScriptKind = "normal"


@dataclass(frozen=True, slots=True)
class Asset:
    """A static file or directory copied verbatim next to a route's pages.

    ``alias`` is the destination relative to the route's output directory
    (``"img/app-icon.png"``). Without one, the source's base name is used.
    """

    path: str
    alias: str | None = None

    @property
    def target(self) -> str:
        return self.alias or PurePath(self.path).name


@dataclass(frozen=True, slots=True)
class ScriptOnly:
    """A bundler entry point with no HTML document of its own."""

    entry_point: str


@dataclass(frozen=True, slots=True)
class HtmlPage:
    """One HTML document and the entry point bundled for it.

    Usage::

        page = (
            HtmlPage("src/main.tsx", mount_points=(MountPoint("main", "mount"),))
            .with_script(Script("main.js", "module"))
            .with_title("index")
            .with_link(Link("icon", "favicon.ico"))
        )
    """

    entry_point: str
    mount_points: tuple[MountPoint, ...] = ()
    scripts: tuple[Script, ...] = ()
    links: tuple[Link, ...] = ()
    title: str = ""
    html_name: str = "index.html"
    lang: str = "en"
    viewport: str = DEFAULT_VIEWPORT
    global_css: str | None = None
    hot_reload: bool = False

    # -- Chainable transformations --

    def with_title(self, title: str) -> HtmlPage:
        """Return a new page with a different ``<title>``."""
        return replace(self, title=title)

    def with_html_name(self, html_name: str) -> HtmlPage:
        """Return a new page written to ``html_name`` instead of ``index.html``."""
        return replace(self, html_name=html_name)

    def with_lang(self, lang: str) -> HtmlPage:
        return replace(self, lang=lang)

    def with_viewport(self, viewport: str) -> HtmlPage:
        return replace(self, viewport=viewport)

    def with_global_css(self, css: str | None) -> HtmlPage:
        """Return a new page with an inline ``<style>`` block (``None`` removes it)."""
        return replace(self, global_css=css)

    def with_hot_reload(self, hot_reload: bool = True) -> HtmlPage:
        """Return a new page that also loads the live-reload client script."""
        return replace(self, hot_reload=hot_reload)

    def with_links(self, links: Iterable[Link]) -> HtmlPage:
        """Return a new page whose links are replaced by ``links``."""
        return replace(self, links=tuple(links))

    def with_link(self, link: Link) -> HtmlPage:
        return replace(self, links=(*self.links, link))

    def with_script(self, script: Script) -> HtmlPage:
        return replace(self, scripts=(*self.scripts, script))

    def with_mount_point(self, mount_point: MountPoint) -> HtmlPage:
        return replace(self, mount_points=(*self.mount_points, mount_point))

    def then(self, fn: Callable[[HtmlPage], HtmlPage]) -> HtmlPage:
        """Pass this page through ``fn`` and return its result."""
        return fn(self)

    def render(self) -> str:
        """Return the document as a single-line HTML string."""
        from tananoni.pages.renderer import render_html

        return render_html(self)


Unit: TypeAlias = HtmlPage | ScriptOnly
