"""``tananoni dev`` — build, serve and live-reload."""

import argparse
import dataclasses
import sys

from tananoni.cli._resolve import resolve_site
from tananoni.config import DevConfig
from tananoni.errors import ConfigurationError


def run_dev(args: argparse.Namespace) -> None:
    """Resolve ``args.site`` and run the dev server. CLI flags override defaults."""
    try:
        site = resolve_site(args.site)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    overrides = {
        "host": args.host,
        "port": args.port,
        "watch_dir": args.watch,
    }
    config = dataclasses.replace(
        DevConfig(), **{key: value for key, value in overrides.items() if value is not None}
    )
    site.run(config)
