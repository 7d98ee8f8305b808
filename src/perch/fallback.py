"""Fallback route derivation for dynamic routes.

Statically generated sites rarely have a loader module for every
concrete URL (``/posts/1``), but they always have one for the route
template (``/posts/[id]``). When the exact loader is missing, the
matched route's segments point at that template.
"""

from collections.abc import Sequence


def is_dynamic_segment(segment: str) -> bool:
    """Return True for bracket-notation segments like ``[id]`` or ``[...rest]``."""
    return "[" in segment and "]" in segment


def derive_fallback(pathname: str, segments: Sequence[str] | None) -> str | None:
    """Propose the template route to retry after *pathname* fails.

    Returns ``None`` when there are no segments, none of them is dynamic,
    or the template route is *pathname* itself.
    """
    if not segments:
        return None
    if not any(is_dynamic_segment(segment) for segment in segments):
        return None

    candidate = "/" + "/".join(segments)
    if candidate == pathname:
        return None
    return candidate
