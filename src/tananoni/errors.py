"""Tananoni exception hierarchy.

Shared across the route builder, generator, bundler, and watch loop so
every module raises and catches the same types.
"""

from collections.abc import Sequence
from dataclasses import dataclass


class TananoniError(Exception):
    """Base for all tananoni-specific errors."""


class ConfigurationError(TananoniError):
    """Raised when build or dev configuration is invalid.

    Typically raised from ``BuildConfig.__post_init__`` or while the CLI
    resolves its import target.
    """


class InvalidRouteError(TananoniError, ValueError):
    """A route could not be attached to its parent.

    Raised by ``Route.add_child()`` when the child has no path segment,
    is the parent itself, or already belongs to another route.
    """


class RouteFrozenError(TananoniError, RuntimeError):
    """A route was modified after generation started."""


@dataclass(frozen=True, slots=True)
class BundlerError(TananoniError):
    """The external bundler failed for one route.

    Collected into that route's ``BuildOutcome`` by the generator rather
    than propagated, so sibling and child routes still build.
    """

    entry_points: tuple[str, ...]
    returncode: int | None = None
    stderr: str = ""

    def __str__(self) -> str:
        entries = ", ".join(self.entry_points) or "<no entry points>"
        if self.returncode is None:
            summary = f"bundler could not run for {entries}"
        else:
            summary = f"bundler exited with {self.returncode} for {entries}"
        detail = self.stderr.strip()
        if detail:
            return f"{summary}: {detail}"
        return summary


class WatchError(TananoniError):
    """The file watcher could not start."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot watch {path!r}: {reason}")


def summarize(errors: Sequence[BaseException]) -> str:
    """One line per error, for CLI and log output."""
    return "\n".join(f"{type(exc).__name__}: {exc}" for exc in errors)
