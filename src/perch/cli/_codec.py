"""``perch path`` / ``perch route`` / ``perch fallback`` — pure path helpers."""

import argparse
import sys

from perch.config import LoaderConfig
from perch.errors import ConfigurationError
from perch.fallback import derive_fallback
from perch.paths import to_resource_path, to_route_pathname


def run_codec(args: argparse.Namespace) -> None:
    """Print the result of one path helper.

    ``fallback`` exits 1 when the route has no distinct fallback.
    """
    if args.command == "fallback":
        candidate = derive_fallback(args.pathname, args.segments)
        if candidate is None:
            print(f"No fallback for {args.pathname}", file=sys.stderr)
            raise SystemExit(1)
        print(candidate)
        return

    try:
        config = LoaderConfig(prefix=args.prefix, extension=args.extension)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    if args.command == "path":
        print(to_resource_path(args.pathname, config=config))
    else:
        print(to_route_pathname(args.resource_path, config=config))
