"""``tananoni build`` — one generation pass, non-zero exit on failure."""

import argparse
import dataclasses
import sys

import anyio

from tananoni.build.engine import failed
from tananoni.cli._resolve import resolve_site
from tananoni.errors import ConfigurationError, summarize
from tananoni.site import Website


def run_build(args: argparse.Namespace) -> None:
    """Resolve ``args.site``, generate it, and report failed routes."""
    try:
        site = resolve_site(args.site)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.output:
        site = Website(
            site.route,
            dataclasses.replace(site.config, output_dir=args.output),
            bundler=site.generator.bundler,
        )

    outcomes = anyio.run(site.generate)
    broken = failed(outcomes)
    for outcome in broken:
        print(f"FAILED {outcome.directory}", file=sys.stderr)
        print(summarize(outcome.errors), file=sys.stderr)

    print(f"{len(outcomes) - len(broken)}/{len(outcomes)} route(s) built into {site.output_dir}")
    if broken:
        raise SystemExit(1)
