"""The ``Website`` facade: one route tree plus how to build and serve it."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING

from tananoni.build.bundler import Bundler, EsbuildBundler
from tananoni.build.engine import BuildOutcome, ContextOutcome, Generator
from tananoni.config import BuildConfig, DevConfig
from tananoni.routing.route import Route

if TYPE_CHECKING:
    from tananoni.server.app import DevApp


class Website:
    """A route tree bound to its build configuration.

    Basic usage::

        from tananoni import BuildConfig, HtmlPage, MountPoint, Route, Script, Website

        root = (
            Route()
            .add_page(
                HtmlPage("src/main.tsx", (MountPoint("main", "mount"),), (Script("main.js"),))
                .with_title("index")
                .with_hot_reload()
            )
            .add_asset("favicon.ico")
            .with_hot_reload()
        )
        site = Website(root, BuildConfig(jsx_import_source="preact"))

    Then ``tananoni build mysite:site`` for a one-off build, or
    ``tananoni dev mysite:site`` to serve with live reload.
    """

    __slots__ = ("config", "generator", "route")

    def __init__(
        self,
        route: Route,
        config: BuildConfig | None = None,
        *,
        bundler: Bundler | None = None,
    ) -> None:
        self.route = route
        self.config = config or BuildConfig()
        self.generator = Generator(
            bundler or EsbuildBundler(self.config.esbuild),
            self.config.build_options(),
        )

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    async def generate(self) -> list[BuildOutcome]:
        """Run one full generation pass over the route tree."""
        return await self.generator.generate(self.route, self.output_dir)

    async def generate_with_context(self) -> list[ContextOutcome]:
        """Write pages and assets; return a rebuild handle per route."""
        return await self.generator.generate_with_context(self.route, self.output_dir)

    def dev_app(self, config: DevConfig | None = None) -> DevApp:
        """An ASGI app serving this site with live reload.

        The generated ``hot_reload.js`` is pointed at ``config.reload_path``,
        and the output directory is excluded from watching so a build never
        triggers another one.
        """
        from tananoni.realtime.client import hot_reload_script
        from tananoni.server.app import DevApp

        config = config or DevConfig()
        output_name = self.output_dir.name
        if output_name and output_name not in config.excludes:
            config = dataclasses.replace(config, excludes=(*config.excludes, output_name))
        self.generator.hot_reload_script = hot_reload_script(
            config.reload_path, config.reconnect_ms
        )
        return DevApp(self.generate, self.output_dir, config)

    def run(self, config: DevConfig | None = None) -> None:
        """Build, serve and watch until interrupted."""
        from tananoni.server.dev import run_dev_server

        config = config or DevConfig()
        run_dev_server(self.dev_app(config), config.host, config.port)
