"""Tananoni CLI — one-off builds and the live-reload dev server.

Entry point registered as ``tananoni`` in ``pyproject.toml``::

    [project.scripts]
    tananoni = "tananoni.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``tananoni`` command."""
    parser = argparse.ArgumentParser(
        prog="tananoni",
        description="Tananoni — declarative static sites bundled with esbuild.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=("debug", "info", "warning", "error"),
        help="Logging verbosity (default: info)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- tananoni build ---------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Generate the site once")
    build_parser.add_argument(
        "site", help="Site target: module[:name] or file.py[:name] (e.g. mysite:site)"
    )
    build_parser.add_argument(
        "--output",
        default=None,
        help="Output directory (overrides the site's BuildConfig.output_dir)",
    )

    # -- tananoni dev -----------------------------------------------------
    dev_parser = subparsers.add_parser("dev", help="Build, serve and reload on change")
    dev_parser.add_argument(
        "site", help="Site target: module[:name] or file.py[:name] (e.g. mysite:site)"
    )
    dev_parser.add_argument("--host", default=None, help="Bind host address")
    dev_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    dev_parser.add_argument("--watch", default=None, help="Directory to watch (default: .)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "build":
        from tananoni.cli._build import run_build

        run_build(args)
    elif args.command == "dev":
        from tananoni.cli._dev import run_dev

        run_dev(args)
