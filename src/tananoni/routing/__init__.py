"""Route tree."""

from tananoni.routing.route import Route

__all__ = ["Route"]
