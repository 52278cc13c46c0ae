"""Recursive site generation.

Walks the route tree depth-first, parents before children. For each
route it creates the output directory, writes the live-reload client
and HTML pages, runs the bundler once over every entry point of the
route, and copies assets. Each route yields one outcome; a failing route
records its errors and the walk carries on with the rest of the tree.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

import anyio
import anyio.to_thread

from tananoni.build.bundler import BuildOptions, BundleContext, Bundler, BundleResult
from tananoni.errors import BundlerError
from tananoni.pages.renderer import render_html
from tananoni.pages.types import Asset, HtmlPage, ScriptOnly
from tananoni.realtime.client import HOT_RELOAD_FILENAME, HOT_RELOAD_SCRIPT
from tananoni.routing.route import Route

logger = logging.getLogger("tananoni.build")

T = TypeVar("T")

# Failures recorded per route instead of aborting the walk.
RECOVERABLE = (BundlerError, OSError)


@dataclass(frozen=True, slots=True)
class RouteOutcome(Generic[T]):
    """What one route produced during a generation pass.

    ``artifact`` is ``None`` when the route has no entry points or the
    bundler failed. ``errors`` holds every failure seen for this route.
    """

    route: Route
    directory: Path
    artifact: T | None = None
    errors: tuple[Exception, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


BuildOutcome = RouteOutcome[BundleResult]
ContextOutcome = RouteOutcome[BundleContext]


def failed(outcomes: Sequence[RouteOutcome[T]]) -> list[RouteOutcome[T]]:
    """The outcomes that recorded at least one error."""
    return [outcome for outcome in outcomes if not outcome.ok]


class Generator:
    """Generates a site from a route tree.

    Owns the bundler and the options shared by every bundler call, so
    nothing about a build lives in module globals.

    Usage::

        generator = Generator(EsbuildBundler(), BuildOptions(jsx_import_source="preact"))
        outcomes = await generator.generate(root, Path("dist"))
        for outcome in failed(outcomes):
            print(outcome.directory, outcome.errors)
    """

    __slots__ = ("bundler", "hot_reload_script", "options")

    def __init__(
        self,
        bundler: Bundler,
        options: BuildOptions | None = None,
        *,
        hot_reload_script: str = HOT_RELOAD_SCRIPT,
    ) -> None:
        self.bundler = bundler
        self.options = options or BuildOptions()
        self.hot_reload_script = hot_reload_script

    async def generate(self, root: Route, output_root: str | Path) -> list[BuildOutcome]:
        """Build every route and return one outcome per route in walk order."""

        async def bundle(route: Route, directory: Path) -> BundleResult:
            return await self.bundler.build(route.entry_points, directory, self.options)

        return await self._walk(root, Path(output_root), bundle)

    async def generate_with_context(
        self, root: Route, output_root: str | Path
    ) -> list[ContextOutcome]:
        """Like ``generate()``, but hand back a rebuild handle per route.

        Pages, the reload client and assets are written as usual; the
        bundler only runs when a handle's ``rebuild()`` is awaited.
        """

        async def prepare(route: Route, directory: Path) -> BundleContext:
            return await self.bundler.context(route.entry_points, directory, self.options)

        return await self._walk(root, Path(output_root), prepare)

    async def _walk(
        self,
        root: Route,
        output_root: Path,
        bundle: Callable[[Route, Path], Awaitable[T]],
    ) -> list[RouteOutcome[T]]:
        root.freeze()
        outcomes: list[RouteOutcome[T]] = []
        for route, parts in root.walk():
            directory = output_root.joinpath(*parts)
            outcome = await self._generate_route(route, directory, bundle)
            if outcome.ok:
                logger.debug("generated %s", directory)
            else:
                logger.warning(
                    "route %s failed with %d error(s)", directory, len(outcome.errors)
                )
            outcomes.append(outcome)
        return outcomes

    async def _generate_route(
        self,
        route: Route,
        directory: Path,
        bundle: Callable[[Route, Path], Awaitable[T]],
    ) -> RouteOutcome[T]:
        errors: list[Exception] = []
        try:
            await anyio.Path(directory).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return RouteOutcome(route, directory, None, (exc,))

        if route.hot_reload:
            try:
                await anyio.Path(directory / HOT_RELOAD_FILENAME).write_text(
                    self.hot_reload_script, encoding="utf-8"
                )
            except OSError as exc:
                errors.append(exc)

        for unit in route.units:
            match unit:
                case HtmlPage():
                    try:
                        await anyio.Path(directory / unit.html_name).write_text(
                            render_html(unit), encoding="utf-8"
                        )
                    except OSError as exc:
                        errors.append(exc)
                case ScriptOnly():
                    pass

        artifact: T | None = None
        if route.units:
            try:
                artifact = await bundle(route, directory)
            except RECOVERABLE as exc:
                errors.append(exc)

        for asset in route.assets:
            try:
                await anyio.to_thread.run_sync(copy_asset, asset, directory)
            except OSError as exc:
                errors.append(exc)

        return RouteOutcome(route, directory, artifact, tuple(errors))


def copy_asset(asset: Asset, directory: Path) -> Path:
    """Copy ``asset`` into ``directory``, overwriting what is there.

    Directories are copied recursively. Parent directories of an alias
    such as ``img/app-icon.png`` are created as needed.
    """
    source = Path(asset.path)
    target = directory / asset.target
    target.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(source, target, dirs_exist_ok=True)
    else:
        shutil.copy2(source, target)
    return target
