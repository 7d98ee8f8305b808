"""Path codec: route pathnames <-> loader resource paths.

A route pathname such as ``/posts/1`` maps to a loader module at
``/_expo/loaders/posts/1.js``. The root route maps to ``index``::

    >>> to_resource_path("/")
    '/_expo/loaders/index.js'
    >>> to_resource_path("/about/?tab=team#top")
    '/_expo/loaders/about.js'
    >>> to_route_pathname("/_expo/loaders/posts/1.js")
    '/posts/1'

Forward mapping parses the input as a URL path against a fixed origin,
so it is handled the way a browser would: surrounding spaces and control
characters are trimmed, query strings and fragments dropped, backslashes
treated as slashes, and dot segments (including ``%2e`` spellings)
resolved. The inverse is a plain textual substitution and exists for
diagnostics; it does not round-trip routes containing ``/index``.
"""

import re
from urllib.parse import quote, urljoin, urlsplit

from perch.config import LoaderConfig

_DEFAULT_CONFIG = LoaderConfig()

# Arbitrary origin; only the resolved path is used
_BASE = "http://localhost"

# Characters browsers leave unescaped in a URL path (besides alphanumerics and "_.-~")
_PATH_SAFE = "/%!$&'()*+,;=:@[]^|"

# Leading/trailing C0 controls and spaces, plus tabs and newlines anywhere
_C0_STRIP_RE = re.compile(r"\A[\x00-\x20]+|[\x00-\x20]+\Z|[\t\n\r]")

# ".", "..", and their percent-encoded spellings ("%2e", ".%2E", ...)
_DOT_SEGMENT_RE = re.compile(r"\A(?:\.|%2e){1,2}\Z", re.IGNORECASE)


def _resolve_encoded_dots(raw: str) -> str:
    """Rewrite ``%2e`` dot segments in the path part to literal dots."""
    end = len(raw)
    for sep in "?#":
        index = raw.find(sep)
        if index != -1:
            end = min(end, index)
    segments = [
        segment.lower().replace("%2e", ".") if _DOT_SEGMENT_RE.match(segment) else segment
        for segment in raw[:end].split("/")
    ]
    return "/".join(segments) + raw[end:]


def clean_pathname(pathname: str) -> str:
    """Resolve *pathname* to a bare URL path.

    Trims surrounding whitespace, strips query and fragment, resolves
    ``.`` and ``..`` segments (also when written ``%2e``), and
    percent-encodes characters that are not valid in a path. Never raises.
    """
    raw = _C0_STRIP_RE.sub("", pathname)
    raw = _resolve_encoded_dots(raw.replace("\\", "/"))
    try:
        path = urlsplit(urljoin(_BASE + "/", raw)).path
    except ValueError:
        # Malformed authority (e.g. "//[bad"): fall back to the raw path text
        path = raw.split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    return quote(path, safe=_PATH_SAFE)


def normalize_pathname(pathname: str) -> str:
    """Clean *pathname* and drop one trailing slash (the root stays ``/``)."""
    path = clean_pathname(pathname)
    if path == "/":
        return path
    return path.removesuffix("/")


def to_resource_path(pathname: str, *, config: LoaderConfig | None = None) -> str:
    """Convert a route pathname to its loader resource path."""
    cfg = config or _DEFAULT_CONFIG
    normalized = normalize_pathname(pathname)
    body = "/index" if normalized == "/" else normalized
    return f"{cfg.prefix}{body}{cfg.extension}"


def to_route_pathname(resource_path: str, *, config: LoaderConfig | None = None) -> str:
    """Convert a loader resource path back to a route pathname.

    Inverse of :func:`to_resource_path` for every normalized route except
    that ``/index`` collapses to the root.
    """
    cfg = config or _DEFAULT_CONFIG
    route = resource_path.replace(cfg.prefix, "", 1).removesuffix(cfg.extension)
    route = route.replace("/index", "/", 1)
    return route or "/"
