"""Build and dev-server configuration.

BuildConfig and DevConfig are frozen dataclasses: immutable after
creation, IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from tananoni.errors import ConfigurationError

if TYPE_CHECKING:
    from tananoni.build.bundler import BuildOptions, BundlerPlugin

FORMATS = frozenset({"iife", "cjs", "esm"})
LOG_LEVELS = frozenset({"verbose", "debug", "info", "warning", "error", "silent"})
JSX_MODES = frozenset({"transform", "preserve", "automatic"})


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Generation settings. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = BuildConfig(output_dir="release", jsx_import_source="preact")
    """

    # Output
    output_dir: str | Path = "dist"

    # Bundler
    jsx_import_source: str | None = None
    jsx: str = "automatic"
    log_level: str | None = None  # None = leave esbuild's own default
    format: str = "esm"
    bundle: bool = True
    plugins: tuple["BundlerPlugin", ...] = ()
    esbuild: str = "esbuild"  # Executable name or path

    def __post_init__(self) -> None:
        if self.format not in FORMATS:
            msg = f"format must be one of {sorted(FORMATS)}, got {self.format!r}"
            raise ConfigurationError(msg)
        if self.log_level is not None and self.log_level not in LOG_LEVELS:
            msg = f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)
        if self.jsx not in JSX_MODES:
            msg = f"jsx must be one of {sorted(JSX_MODES)}, got {self.jsx!r}"
            raise ConfigurationError(msg)

    def build_options(self) -> "BuildOptions":
        """Options shared by every bundler call of a generation pass."""
        from tananoni.build.bundler import BuildOptions

        return BuildOptions(
            jsx_import_source=self.jsx_import_source,
            jsx=self.jsx,
            log_level=self.log_level,
            format=self.format,
            bundle=self.bundle,
            plugins=self.plugins,
        )


@dataclass(frozen=True, slots=True)
class DevConfig:
    """Development server and live-reload settings."""

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Watching
    watch_dir: str | Path = "."
    watch_extensions: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".css")
    excludes: tuple[str, ...] = ("dist", "node_modules", ".git")
    settle_delay: float = 0.01  # Seconds to let the editor finish writing
    cooldown: float = 1.0  # Seconds during which further events are dropped

    # Reload channel
    reload_path: str = "/refresh"
    reconnect_ms: int = 1000

    # Static files
    index: str = "index.html"
    cache_control: str = "no-cache"

    def __post_init__(self) -> None:
        if self.settle_delay < 0 or self.cooldown < 0:
            msg = "settle_delay and cooldown must not be negative"
            raise ConfigurationError(msg)
        if not self.reload_path.startswith("/"):
            msg = f"reload_path must start with '/', got {self.reload_path!r}"
            raise ConfigurationError(msg)
