"""Perch CLI — inspect loader paths and fetch loader payloads.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys

from perch.config import DEFAULT_EXTENSION, DEFAULT_PREFIX


def _add_convention_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--prefix", default=DEFAULT_PREFIX, help="Loader path prefix")
    parser.add_argument(
        "--extension", default=DEFAULT_EXTENSION, help="Loader file extension"
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — resolve and fetch route loader modules.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch path -------------------------------------------------------
    path_parser = subparsers.add_parser("path", help="Print the loader path for a route")
    path_parser.add_argument("pathname", help="Route pathname (e.g. /posts/1)")
    _add_convention_flags(path_parser)

    # -- perch route ------------------------------------------------------
    route_parser = subparsers.add_parser("route", help="Print the route for a loader path")
    route_parser.add_argument("resource_path", help="Loader path (e.g. /_expo/loaders/index.js)")
    _add_convention_flags(route_parser)

    # -- perch fallback ---------------------------------------------------
    fallback_parser = subparsers.add_parser(
        "fallback", help="Print the fallback route for a dynamic route"
    )
    fallback_parser.add_argument("pathname", help="Route pathname (e.g. /posts/1)")
    fallback_parser.add_argument("segments", nargs="+", help="Matched route segments")

    # -- perch fetch ------------------------------------------------------
    fetch_parser = subparsers.add_parser("fetch", help="Fetch and print a loader payload")
    fetch_parser.add_argument("base_url", help="Origin serving loaders (e.g. http://localhost:8081)")
    fetch_parser.add_argument("pathname", help="Route pathname (e.g. /posts/1)")
    fetch_parser.add_argument(
        "--segment",
        dest="segments",
        action="append",
        default=None,
        help="Matched route segment (repeatable, in order)",
    )
    fetch_parser.add_argument(
        "--race",
        action="store_true",
        help="Request the primary and fallback loaders concurrently",
    )
    fetch_parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds")
    _add_convention_flags(fetch_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command in ("path", "route", "fallback"):
        from perch.cli._codec import run_codec

        run_codec(args)
    elif args.command == "fetch":
        from perch.cli._fetch import run_fetch

        run_fetch(args)
