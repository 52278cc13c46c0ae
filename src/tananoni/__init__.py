"""Tananoni — declarative static sites bundled with esbuild.

Describe a tree of routes holding pages, script-only entry points and
assets; tananoni writes the HTML, runs esbuild once per route, copies the
assets, and mirrors the route tree into the output directory. In
development it watches the sources, rebuilds on change and reloads every
open browser.

Basic usage::

    from tananoni import HtmlPage, MountPoint, Route, Script, Website

    under = Route("under").add_page(
        HtmlPage("src/hello.tsx", (MountPoint("main", "mount"),), (Script("hello.js"),))
        .with_title("hello")
        .with_html_name("hello.html")
    )
    root = (
        Route()
        .add_page(HtmlPage("src/main.tsx", (MountPoint("main", "mount"),), (Script("main.js"),)))
        .add_asset("favicon.ico")
        .add_child(under)
    )
    site = Website(root)

    # tananoni build mysite:site
    # tananoni dev mysite:site
"""

__version__ = "0.1.0"
__all__ = [
    "Asset",
    "BuildConfig",
    "BuildOutcome",
    "BundlerError",
    "ConfigurationError",
    "DevConfig",
    "EsbuildBundler",
    "Generator",
    "HtmlPage",
    "InvalidRouteError",
    "Link",
    "MountPoint",
    "Route",
    "RouteFrozenError",
    "Script",
    "ScriptOnly",
    "TananoniError",
    "WatchError",
    "Website",
    "failed",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tananoni`` fast while providing a clean top-level API.
    """
    if name == "Website":
        from tananoni.site import Website

        return Website

    if name in ("BuildConfig", "DevConfig"):
        from tananoni import config as _config

        return getattr(_config, name)

    if name == "Route":
        from tananoni.routing.route import Route

        return Route

    if name in ("Asset", "HtmlPage", "Link", "MountPoint", "Script", "ScriptOnly"):
        from tananoni.pages import types as _types

        return getattr(_types, name)

    if name in ("BuildOutcome", "Generator", "failed"):
        from tananoni.build import engine as _engine

        return getattr(_engine, name)

    if name == "EsbuildBundler":
        from tananoni.build.bundler import EsbuildBundler

        return EsbuildBundler

    if name in (
        "BundlerError",
        "ConfigurationError",
        "InvalidRouteError",
        "RouteFrozenError",
        "TananoniError",
        "WatchError",
    ):
        from tananoni import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
