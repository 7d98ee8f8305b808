"""Perch exception hierarchy.

Shared across the path codec, transports, and the fetch orchestrator so
every module raises and catches the same types.

Every ``LoaderError`` is recoverable once through the fallback step.
Anything else (including ``ConfigurationError``) is a caller mistake and
propagates untouched.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when loader configuration is invalid.

    Raised from ``LoaderConfig.__post_init__`` so a bad config never
    reaches a fetch.
    """


class LoaderError(PerchError):
    """Base for failures while retrieving or decoding a loader module.

    ``resource_path`` names the loader resource that failed.
    """

    def __init__(self, message: str, *, resource_path: str = "") -> None:
        self.resource_path = resource_path
        super().__init__(message)


class LoaderFetchFailed(LoaderError):  # noqa: N818 — mirrors the wire-level failure name
    """The transport answered with a non-success status."""

    def __init__(self, status: int, *, resource_path: str = "") -> None:
        self.status = status
        super().__init__(f"Failed to fetch loader data: {status}", resource_path=resource_path)


class InvalidLoaderFormat(LoaderError):  # noqa: N818
    """The body has no ``export default <value>`` line."""

    def __init__(self, *, resource_path: str = "") -> None:
        super().__init__("Invalid loader module format", resource_path=resource_path)


class PayloadDecodeFailed(LoaderError):  # noqa: N818
    """The exported value is not valid JSON."""

    def __init__(self, detail: str, *, resource_path: str = "") -> None:
        self.detail = detail
        super().__init__(f"Invalid loader payload: {detail}", resource_path=resource_path)


class TransportFailure(LoaderError):  # noqa: N818
    """The transport could not complete the request (DNS, connection, timeout)."""

    def __init__(self, detail: str, *, resource_path: str = "") -> None:
        self.detail = detail
        super().__init__(f"Transport failure: {detail}", resource_path=resource_path)
