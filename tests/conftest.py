"""Shared fixtures: a recording bundler and in-memory reload sessions."""

from collections.abc import Sequence
from pathlib import Path

import pytest

from tananoni.build.bundler import BuildOptions, BundleResult
from tananoni.errors import BundlerError
from tananoni.realtime.sessions import SessionClosed


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeContext:
    def __init__(self, bundler: "FakeBundler", entry_points: tuple[str, ...], outdir: Path) -> None:
        self.bundler = bundler
        self.entry_points = entry_points
        self.outdir = outdir
        self.disposed = False

    async def rebuild(self) -> BundleResult:
        return await self.bundler.build(self.entry_points, self.outdir, BuildOptions())

    async def dispose(self) -> None:
        self.disposed = True


class FakeBundler:
    """Records every call; fails for any outdir whose name is in ``fail_for``."""

    def __init__(self, fail_for: Sequence[str] = ()) -> None:
        self.calls: list[tuple[tuple[str, ...], Path, BuildOptions]] = []
        self.contexts: list[FakeContext] = []
        self.fail_for = set(fail_for)

    async def build(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> BundleResult:
        entries = tuple(entry_points)
        self.calls.append((entries, outdir, options))
        if outdir.name in self.fail_for:
            raise BundlerError(entries, 1, "boom")
        return BundleResult(entries, outdir)

    async def context(
        self, entry_points: Sequence[str], outdir: Path, options: BuildOptions
    ) -> FakeContext:
        ctx = FakeContext(self, tuple(entry_points), outdir)
        self.contexts.append(ctx)
        return ctx


class FakeSession:
    """Collects sent frames; raises SessionClosed once ``closed`` is set."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.sent: list[str] = []
        self.closed = False

    def __repr__(self) -> str:
        return f"FakeSession({self.name!r})"

    async def send_text(self, text: str) -> None:
        if self.closed:
            raise SessionClosed(self.name)
        self.sent.append(text)


@pytest.fixture
def bundler() -> FakeBundler:
    return FakeBundler()


@pytest.fixture
def make_session():
    """Factory for named in-memory sessions."""
    return FakeSession
