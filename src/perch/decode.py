"""Loader module decoding.

Loader modules are generated as a JavaScript module whose payload sits
on one line::

    export default {"title": "Hello"}

Extraction is pattern based, not a module evaluator: the remainder of
the line after ``export default`` is parsed as JSON. When several lines
match, the last one wins.
"""

import json
import re
from typing import Any

from perch.errors import InvalidLoaderFormat, PayloadDecodeFailed

# Matches up to end of line; "." never crosses a newline
_EXPORT_DEFAULT_RE = re.compile(r"export default (.+)$", re.MULTILINE)


def extract_export(text: str) -> str | None:
    """Return the JSON text of the last ``export default`` line, or None."""
    value: str | None = None
    for match in _EXPORT_DEFAULT_RE.finditer(text):
        value = match.group(1)
    return value


def decode_loader_module(text: str, *, resource_path: str = "") -> Any:
    """Decode a loader module body into its payload.

    Raises ``InvalidLoaderFormat`` when no ``export default`` line exists
    and ``PayloadDecodeFailed`` when the exported value is not JSON.
    """
    value = extract_export(text)
    if value is None:
        raise InvalidLoaderFormat(resource_path=resource_path)
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise PayloadDecodeFailed(str(exc), resource_path=resource_path) from exc
