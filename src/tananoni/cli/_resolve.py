"""Locate the site a CLI command operates on.

A target is ``"<module or file.py>[:<name>]"``. The named object may be a
``Website``, a bare ``Route`` (built with the default ``BuildConfig``),
or a zero-argument callable returning either.
"""

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from tananoni.errors import ConfigurationError
from tananoni.routing.route import Route
from tananoni.site import Website

DEFAULT_NAME = "site"


def resolve_site(target: str) -> Website:
    """Load ``target`` and return it as a ``Website``.

    Raises:
        ConfigurationError: If the module cannot be loaded, the name is
            missing, or the object is not a site description.
    """
    source, _, name = target.partition(":")
    module = _load_module(source)
    try:
        obj = getattr(module, name or DEFAULT_NAME)
    except AttributeError as exc:
        msg = f"{source!r} defines no {name or DEFAULT_NAME!r}"
        raise ConfigurationError(msg) from exc
    return _as_website(obj, target)


def _load_module(source: str) -> ModuleType:
    if source.endswith(".py"):
        path = Path(source).resolve()
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None or not path.is_file():
            msg = f"no site file at {source!r}"
            raise ConfigurationError(msg)
        module = importlib.util.module_from_spec(spec)
        # Sources next to the site file import as siblings
        sys.path.insert(0, str(path.parent))
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            msg = f"loading {source!r} failed: {exc}"
            raise ConfigurationError(msg) from exc
        finally:
            sys.path.remove(str(path.parent))
        return module

    try:
        return importlib.import_module(source)
    except ImportError as exc:
        msg = f"cannot import {source!r}: {exc}"
        raise ConfigurationError(msg) from exc


def _as_website(obj: object, target: str) -> Website:
    match obj:
        case Website():
            return obj
        case Route():
            return Website(obj)
        case _ if callable(obj):
            try:
                built = obj()
            except Exception as exc:
                msg = f"{target!r} raised while building the site: {exc}"
                raise ConfigurationError(msg) from exc
            if isinstance(built, Website | Route):
                return _as_website(built, target)
            kind = type(built).__name__
        case _:
            kind = type(obj).__name__
    msg = f"{target!r} is a {kind}, expected a Website or Route"
    raise ConfigurationError(msg)
