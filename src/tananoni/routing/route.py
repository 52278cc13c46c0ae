"""Route tree: the output directory structure of a site.

Each ``Route`` owns its units (pages and script-only entry points), its
assets and its child routes. Routes are built with chainable appenders
that return the same route, then frozen once generation starts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from tananoni.errors import InvalidRouteError, RouteFrozenError
from tananoni.pages.types import Asset, HtmlPage, ScriptOnly, Unit


class Route:
    """A node in the route tree.

    Usage::

        docs = Route("docs").add_page(HtmlPage("src/docs.tsx"))
        site = (
            Route()
            .add_page(HtmlPage("src/main.tsx"))
            .add_asset(Asset("favicon.ico"))
            .with_hot_reload()
            .add_child(docs)
        )

    Only the root may omit its segment. A child's output directory is its
    parent's directory joined with the child's segment.
    """

    __slots__ = ("_frozen", "_parent", "assets", "children", "hot_reload", "segment", "units")

    def __init__(self, segment: str | None = None) -> None:
        self.segment = segment
        self.children: list[Route] = []
        self.units: list[Unit] = []
        self.assets: list[Asset] = []
        self.hot_reload: bool = False
        self._parent: Route | None = None
        self._frozen: bool = False

    def __repr__(self) -> str:
        return (
            f"Route({self.segment!r}, units={len(self.units)}, "
            f"assets={len(self.assets)}, children={len(self.children)})"
        )

    # -- Builders --

    def add_page(self, page: HtmlPage) -> Route:
        """Append an HTML page to this route."""
        self._check_not_frozen()
        self.units.append(page)
        return self

    def add_script(self, script: ScriptOnly | str) -> Route:
        """Append a script-only entry point (bundled, no HTML)."""
        self._check_not_frozen()
        if isinstance(script, str):
            script = ScriptOnly(script)
        self.units.append(script)
        return self

    def add_asset(self, asset: Asset | str) -> Route:
        """Append a static file or directory copied into this route's directory."""
        self._check_not_frozen()
        if isinstance(asset, str):
            asset = Asset(asset)
        self.assets.append(asset)
        return self

    def add_child(self, child: Route) -> Route:
        """Attach ``child`` below this route.

        Raises:
            InvalidRouteError: If the child has no segment, is this route
                or one of its ancestors, or already has a parent. The
                children list is left unchanged.
            RouteFrozenError: If this route or ``child`` is frozen.
        """
        self._check_not_frozen()
        child._check_not_frozen()
        if not child.segment:
            msg = "a child route needs a non-empty path segment"
            raise InvalidRouteError(msg)
        if child._parent is not None:
            msg = f"route {child.segment!r} is already attached to another route"
            raise InvalidRouteError(msg)
        node: Route | None = self
        while node is not None:
            if node is child:
                msg = f"attaching route {child.segment!r} here would create a cycle"
                raise InvalidRouteError(msg)
            node = node._parent
        child._parent = self
        self.children.append(child)
        return self

    def with_hot_reload(self, hot_reload: bool = True) -> Route:
        """Write the live-reload client script into this route's directory."""
        self._check_not_frozen()
        self.hot_reload = hot_reload
        return self

    def then(self, fn: Callable[[Route], Route]) -> Route:
        """Pass this route through ``fn`` and return its result."""
        return fn(self)

    # -- Freezing --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> Route:
        """Make this route and its whole subtree read-only. Idempotent."""
        for route, _ in self.walk():
            route._frozen = True
        return self

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify a route after generation has started. "
                "Build the whole tree before handing it to the generator."
            )
            raise RouteFrozenError(msg)

    # -- Traversal --

    def walk(self, parts: tuple[str, ...] = ()) -> Iterator[tuple[Route, tuple[str, ...]]]:
        """Yield ``(route, segments)`` depth-first, parents before children.

        ``segments`` are the path segments from the root down to and
        including this route.
        """
        if self.segment:
            parts = (*parts, self.segment)
        yield self, parts
        for child in self.children:
            yield from child.walk(parts)

    @property
    def entry_points(self) -> tuple[str, ...]:
        """Entry points of every unit, in the order they were added."""
        return tuple(unit.entry_point for unit in self.units)

    @property
    def pages(self) -> tuple[HtmlPage, ...]:
        return tuple(unit for unit in self.units if isinstance(unit, HtmlPage))
