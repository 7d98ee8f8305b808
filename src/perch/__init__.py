"""Perch — route-to-loader resolution and fault-tolerant retrieval.

Maps a route pathname to the loader module that carries its data,
fetches and decodes it, and falls back once to the route template's
loader when the exact one is missing.

Basic usage::

    from perch import LoaderClient, LoaderConfig

    async with LoaderClient(LoaderConfig(base_url="http://localhost:8081")) as loaders:
        post = await loaders.fetch("/posts/1", ["posts", "[id]"])

Pure helpers::

    from perch import derive_fallback, to_resource_path

    to_resource_path("/posts/1")                      # "/_expo/loaders/posts/1.js"
    derive_fallback("/posts/1", ["posts", "[id]"])    # "/posts/[id]"
"""

__version__ = "0.1.0"

# Public name -> defining module, resolved on first attribute access
_LAZY_IMPORTS: dict[str, str] = {
    # Errors
    "ConfigurationError": "perch.errors",
    "InvalidLoaderFormat": "perch.errors",
    "LoaderError": "perch.errors",
    "LoaderFetchFailed": "perch.errors",
    "PayloadDecodeFailed": "perch.errors",
    "PerchError": "perch.errors",
    "TransportFailure": "perch.errors",
    # Config
    "LoaderConfig": "perch.config",
    # Path codec and fallback
    "derive_fallback": "perch.fallback",
    "to_resource_path": "perch.paths",
    "to_route_pathname": "perch.paths",
    # Orchestrator
    "FallbackResult": "perch.fetch",
    "LoaderResult": "perch.fetch",
    "PrimaryResult": "perch.fetch",
    "decode_loader_module": "perch.decode",
    "fetch_loader": "perch.fetch",
    "fetch_loader_module": "perch.fetch",
    "resolve_loader": "perch.fetch",
    # Client and transports
    "HTTPXTransport": "perch.transport.httpx_transport",
    "LoaderClient": "perch.client",
    "Transport": "perch.transport.protocol",
    "TransportResponse": "perch.transport.protocol",
}

__all__ = sorted(_LAZY_IMPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast; httpx and anyio load on first use.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, name)
