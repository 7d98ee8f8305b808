"""``perch fetch`` — fetch one loader over HTTP and print its payload."""

import argparse
import json
import sys

import anyio

from perch.client import LoaderClient
from perch.config import LoaderConfig
from perch.errors import ConfigurationError, LoaderError
from perch.fetch import FallbackResult, LoaderResult


def run_fetch(args: argparse.Namespace) -> None:
    """Fetch the loader for ``args.pathname`` from ``args.base_url``.

    Prints the payload as indented JSON on stdout and the serving stage
    on stderr. Exits 1 when no loader data is available.
    """
    try:
        config = LoaderConfig(
            prefix=args.prefix,
            extension=args.extension,
            base_url=args.base_url,
            timeout=args.timeout,
            strategy="race" if args.race else "sequential",
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    async def _run() -> LoaderResult:
        async with LoaderClient(config) as client:
            return await client.resolve(args.pathname, args.segments)

    try:
        result = anyio.run(_run)
    except LoaderError as exc:
        print(f"Error: {exc} ({exc.resource_path})", file=sys.stderr)
        raise SystemExit(1) from exc

    if isinstance(result, FallbackResult):
        print(
            f"Served from fallback {result.resource_path} "
            f"(primary failed: {result.primary_error})",
            file=sys.stderr,
        )
    else:
        print(f"Served from {result.resource_path}", file=sys.stderr)
    print(json.dumps(result.payload, indent=2, ensure_ascii=False))
