"""Bundler interface and the esbuild implementation.

The generator treats the bundler as one opaque awaited call per route:
``build(entry_points, outdir, options)``. ``EsbuildBundler`` runs the
esbuild executable through ``anyio.run_process``; any object with the
same ``build``/``context`` methods can stand in for it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import anyio

from tananoni.errors import BundlerError

logger = logging.getLogger("tananoni.build")


@runtime_checkable
class BundlerPlugin(Protocol):
    """Extends a bundler invocation with extra command-line arguments."""

    name: str

    def arguments(self) -> Sequence[str]: ...


@dataclass(frozen=True, slots=True)
class Loader:
    """Map a file extension to an esbuild loader (``.png`` -> ``file``)."""

    extension: str
    loader: str
    name: str = "loader"

    def arguments(self) -> Sequence[str]:
        return (f"--loader:{self.extension}={self.loader}",)


@dataclass(frozen=True, slots=True)
class Define:
    """Replace a global identifier with a constant expression."""

    identifier: str
    value: str
    name: str = "define"

    def arguments(self) -> Sequence[str]:
        return (f"--define:{self.identifier}={self.value}",)


@dataclass(frozen=True, slots=True)
class External:
    """Leave matching imports out of the bundle."""

    pattern: str
    name: str = "external"

    def arguments(self) -> Sequence[str]:
        return (f"--external:{self.pattern}",)


@dataclass(frozen=True, slots=True)
class Alias:
    """Resolve imports of ``package`` from ``target`` instead."""

    package: str
    target: str
    name: str = "alias"

    def arguments(self) -> Sequence[str]:
        return (f"--alias:{self.package}={self.target}",)


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Options shared by every bundler call in one generation pass."""

    jsx_import_source: str | None = None
    jsx: str = "automatic"
    log_level: str | None = None
    format: str = "esm"
    bundle: bool = True
    plugins: tuple[BundlerPlugin, ...] = ()


@dataclass(frozen=True, slots=True)
class BundleResult:
    """A finished bundler run for one route."""

    entry_points: tuple[str, ...]
    outdir: Path
    stdout: str = ""
    stderr: str = ""


class BundleContext(Protocol):
    """A reusable build handle for one route's entry points."""

    entry_points: tuple[str, ...]
    outdir: Path

    async def rebuild(self) -> BundleResult: ...

    async def dispose(self) -> None: ...


class Bundler(Protocol):
    """The external bundler as the generator sees it."""

    async def build(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> BundleResult: ...

    async def context(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> BundleContext: ...


class EsbuildBundler:
    """Runs the esbuild CLI, one process per call.

    Usage::

        bundler = EsbuildBundler()
        result = await bundler.build(["src/main.tsx"], Path("dist"), BuildOptions())
    """

    __slots__ = ("executable",)

    def __init__(self, executable: str = "esbuild") -> None:
        self.executable = executable

    def command(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> list[str]:
        """The argument vector for one esbuild invocation."""
        argv = [self.executable, *entry_points, f"--outdir={outdir}", f"--format={options.format}"]
        if options.bundle:
            argv.append("--bundle")
        argv.append(f"--jsx={options.jsx}")
        if options.jsx_import_source:
            argv.append(f"--jsx-import-source={options.jsx_import_source}")
        if options.log_level:
            argv.append(f"--log-level={options.log_level}")
        for plugin in options.plugins:
            argv.extend(plugin.arguments())
        return argv

    async def build(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> BundleResult:
        return await _run(self.command(entry_points, outdir, options), tuple(entry_points), outdir)

    async def context(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> EsbuildContext:
        return EsbuildContext(self.command(entry_points, outdir, options), tuple(entry_points), outdir)


class EsbuildContext:
    """Remembers an esbuild command line and re-runs it on demand."""

    __slots__ = ("_argv", "_disposed", "entry_points", "outdir")

    def __init__(self, argv: list[str], entry_points: tuple[str, ...], outdir: Path) -> None:
        self._argv = argv
        self._disposed = False
        self.entry_points = entry_points
        self.outdir = outdir

    async def rebuild(self) -> BundleResult:
        if self._disposed:
            msg = "this build context has been disposed"
            raise RuntimeError(msg)
        return await _run(self._argv, self.entry_points, self.outdir)

    async def dispose(self) -> None:
        self._disposed = True


async def _run(argv: list[str], entry_points: tuple[str, ...], outdir: Path) -> BundleResult:
    logger.debug("running %s", " ".join(argv))
    try:
        completed = await anyio.run_process(argv, check=False)
    except FileNotFoundError as exc:
        raise BundlerError(entry_points, None, str(exc)) from exc

    stdout = completed.stdout.decode("utf-8", errors="replace")
    stderr = completed.stderr.decode("utf-8", errors="replace")
    if completed.returncode != 0:
        raise BundlerError(entry_points, completed.returncode, stderr)
    # esbuild reports its build summary on stderr
    for line in (stderr + stdout).splitlines():
        if line.strip():
            logger.info("esbuild: %s", line.strip())
    return BundleResult(entry_points, outdir, stdout, stderr)

