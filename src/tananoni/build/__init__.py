"""Site generation and the bundler it drives."""

from tananoni.build.bundler import (
    Alias,
    BuildOptions,
    BundleContext,
    Bundler,
    BundlerPlugin,
    BundleResult,
    Define,
    EsbuildBundler,
    External,
    Loader,
)
from tananoni.build.engine import BuildOutcome, ContextOutcome, Generator, RouteOutcome, failed

__all__ = [
    "Alias",
    "BuildOptions",
    "BuildOutcome",
    "BundleContext",
    "BundleResult",
    "Bundler",
    "BundlerPlugin",
    "ContextOutcome",
    "Define",
    "EsbuildBundler",
    "External",
    "Generator",
    "Loader",
    "RouteOutcome",
    "failed",
]
