"""Tests for tananoni.realtime.watch — change filtering, debounce and reload."""

from pathlib import Path

import anyio
import pytest

from tananoni.build.engine import RouteOutcome
from tananoni.config import DevConfig
from tananoni.errors import BundlerError, WatchError
from tananoni.realtime.sessions import SessionRegistry
from tananoni.realtime.watch import (
    ChangeEvent,
    ChangeFilter,
    ChangeKind,
    CoordinatorState,
    ReloadCoordinator,
    watch_directory,
)
from tananoni.routing.route import Route


def _modified(*paths: str) -> ChangeEvent:
    return ChangeEvent(ChangeKind.MODIFIED, paths)


class TestChangeFilter:
    def test_extension_must_match(self) -> None:
        flt = ChangeFilter.create(extensions=(".ts", ".tsx"))
        assert flt.accepts_path("src/main.tsx")
        assert not flt.accepts_path("README.md")

    def test_empty_extensions_accept_all(self) -> None:
        assert ChangeFilter().accepts_path("notes.txt")

    def test_exclude_matches_directory_segment(self) -> None:
        flt = ChangeFilter.create(excludes=("dist",), extensions=(".js",))
        assert not flt.accepts_path("dist/main.js")
        assert not flt.accepts_path("site/dist/nested/main.js")
        assert flt.accepts_path("src/distance.js")

    def test_exclude_matches_file_name(self) -> None:
        flt = ChangeFilter.create(excludes=("build.ts",), extensions=(".ts",))
        assert not flt.accepts_path("build.ts")
        assert flt.accepts_path("src/build.ts.bak.ts")

    def test_event_qualifies_if_any_path_survives(self) -> None:
        flt = ChangeFilter.create(excludes=("dist",), extensions=(".tsx",))
        assert flt.qualifies(_modified("dist/a.tsx", "src/b.tsx"))
        assert not flt.qualifies(_modified("dist/a.tsx", "src/b.md"))

    @pytest.mark.parametrize(
        "kind",
        [ChangeKind.CREATED, ChangeKind.MODIFIED, ChangeKind.REMOVED, ChangeKind.RENAMED],
    )
    def test_qualifying_kinds(self, kind) -> None:
        assert ChangeFilter().qualifies(ChangeEvent(kind, ("a.ts",)))

    def test_other_kind_never_qualifies(self) -> None:
        assert not ChangeFilter().qualifies(ChangeEvent(ChangeKind.OTHER, ("a.ts",)))


class Recorder:
    """Regeneration callback that counts calls and returns a configurable result."""

    def __init__(self, result: object = None, error: Exception | None = None) -> None:
        self.calls = 0
        self.result = result
        self.error = error

    async def __call__(self) -> object:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def _coordinator(regenerate, registry, **kwargs) -> ReloadCoordinator:
    kwargs.setdefault("settle_delay", 0)
    kwargs.setdefault("cooldown", 60)
    return ReloadCoordinator(regenerate, registry, **kwargs)


class TestDebounce:
    @pytest.mark.anyio
    async def test_events_within_cooldown_trigger_one_regeneration(self) -> None:
        regenerate = Recorder()
        coordinator = _coordinator(regenerate, SessionRegistry())

        assert await coordinator.dispatch(_modified("a.ts")) is True
        assert await coordinator.dispatch(_modified("b.ts")) is False
        assert await coordinator.dispatch(_modified("c.ts")) is False

        assert regenerate.calls == 1

    @pytest.mark.anyio
    async def test_idle_again_after_cooldown(self) -> None:
        regenerate = Recorder()
        coordinator = _coordinator(regenerate, SessionRegistry(), cooldown=0.05)

        await coordinator.dispatch(_modified("a.ts"))
        assert coordinator.state is CoordinatorState.COOLING_DOWN
        await anyio.sleep(0.1)
        assert coordinator.state is CoordinatorState.IDLE
        await coordinator.dispatch(_modified("a.ts"))

        assert regenerate.calls == 2

    @pytest.mark.anyio
    async def test_cooling_down_while_regenerating(self) -> None:
        started = anyio.Event()
        release = anyio.Event()
        calls = 0

        async def slow() -> None:
            nonlocal calls
            calls += 1
            started.set()
            await release.wait()

        coordinator = _coordinator(slow, SessionRegistry())
        async with anyio.create_task_group() as tg:
            tg.start_soon(coordinator.dispatch, _modified("a.ts"))
            await started.wait()
            assert coordinator.state is CoordinatorState.COOLING_DOWN
            assert await coordinator.dispatch(_modified("b.ts")) is False
            release.set()

        assert calls == 1

    @pytest.mark.anyio
    async def test_non_qualifying_event_keeps_idle(self) -> None:
        regenerate = Recorder()
        coordinator = _coordinator(
            regenerate, SessionRegistry(), change_filter=ChangeFilter.create(extensions=(".ts",))
        )

        assert await coordinator.dispatch(_modified("notes.md")) is False
        assert coordinator.state is CoordinatorState.IDLE
        assert regenerate.calls == 0

    @pytest.mark.anyio
    async def test_run_consumes_stream_sequentially(self) -> None:
        regenerate = Recorder()
        coordinator = _coordinator(regenerate, SessionRegistry())

        async def events():
            for name in ("a.ts", "b.ts", "c.ts"):
                yield _modified(name)

        await coordinator.run(events())

        assert regenerate.calls == 1


class TestBroadcastPolicy:
    @pytest.mark.anyio
    async def test_success_broadcasts_refresh(self, make_session) -> None:
        registry = SessionRegistry()
        sessions = [make_session("a"), make_session("b")]
        for session in sessions:
            registry.add(session)

        await _coordinator(Recorder(), registry).dispatch(_modified("a.ts"))

        assert [s.sent for s in sessions] == [["refresh"], ["refresh"]]

    @pytest.mark.anyio
    async def test_exception_skips_broadcast_and_loop_survives(self, make_session) -> None:
        registry = SessionRegistry()
        session = make_session()
        registry.add(session)
        regenerate = Recorder(error=RuntimeError("esbuild crashed"))
        coordinator = _coordinator(regenerate, registry, cooldown=0)

        assert await coordinator.dispatch(_modified("a.ts")) is True
        assert session.sent == []

        regenerate.error = None
        await coordinator.dispatch(_modified("a.ts"))
        assert session.sent == ["refresh"]

    @pytest.mark.anyio
    async def test_failed_outcome_skips_broadcast(self, make_session, tmp_path: Path) -> None:
        registry = SessionRegistry()
        session = make_session()
        registry.add(session)
        outcomes = [
            RouteOutcome(Route(), tmp_path),
            RouteOutcome(Route("x"), tmp_path / "x", None, (BundlerError(("a.tsx",), 1, "bad"),)),
        ]

        await _coordinator(Recorder(outcomes), registry).dispatch(_modified("a.ts"))

        assert session.sent == []

    @pytest.mark.anyio
    async def test_successful_outcomes_broadcast(self, make_session, tmp_path: Path) -> None:
        registry = SessionRegistry()
        session = make_session()
        registry.add(session)
        outcomes = [RouteOutcome(Route(), tmp_path)]

        await _coordinator(Recorder(outcomes), registry).dispatch(_modified("a.ts"))

        assert session.sent == ["refresh"]

    @pytest.mark.anyio
    async def test_rebuild_reports_success(self) -> None:
        coordinator = _coordinator(Recorder(), SessionRegistry())
        assert await coordinator.rebuild() is True
        coordinator.regenerate = Recorder(error=OSError("disk full"))
        assert await coordinator.rebuild() is False


class TestFromConfig:
    def test_uses_config_values(self) -> None:
        config = DevConfig(excludes=("out",), watch_extensions=(".py",), settle_delay=0.5, cooldown=2.0)
        coordinator = ReloadCoordinator.from_config(Recorder(), SessionRegistry(), config)

        assert coordinator.settle_delay == 0.5
        assert coordinator.cooldown == 2.0
        assert coordinator.change_filter == ChangeFilter(frozenset({"out"}), frozenset({".py"}))


class TestWatchDirectory:
    def test_missing_directory_fails_at_start(self, tmp_path: Path) -> None:
        with pytest.raises(WatchError, match="not a directory"):
            watch_directory(tmp_path / "missing")

    def test_file_is_not_a_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(WatchError):
            watch_directory(path)

    @pytest.mark.anyio
    async def test_iterating_before_enter_fails(self, tmp_path: Path) -> None:
        watcher = watch_directory(tmp_path)
        with pytest.raises(RuntimeError, match="async with"):
            await watcher.__anext__()

    @pytest.mark.anyio
    async def test_reports_file_changes(self, tmp_path: Path) -> None:
        target = tmp_path / "main.ts"

        async with watch_directory(tmp_path) as events:
            target.write_text("console.log(1)")
            with anyio.fail_after(10):
                async for event in events:
                    if event.kind in (ChangeKind.CREATED, ChangeKind.MODIFIED) and any(
                        Path(p).name == "main.ts" for p in event.paths
                    ):
                        break

    @pytest.mark.anyio
    async def test_directory_removed_before_start(self, tmp_path: Path) -> None:
        target = tmp_path / "src"
        target.mkdir()
        watcher = watch_directory(target)
        target.rmdir()

        with pytest.raises(WatchError, match="cannot watch"):
            async with watcher:
                pass
