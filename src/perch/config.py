"""Loader configuration.

LoaderConfig is a frozen dataclass — immutable after creation, validated
once at construction, shared freely between concurrent fetches.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from perch.errors import ConfigurationError

DEFAULT_PREFIX = "/_expo/loaders"
DEFAULT_EXTENSION = ".js"

STRATEGIES = frozenset({"sequential", "race"})


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """Loader protocol and transport settings. Immutable after creation.

    All fields have defaults matching the loader wire convention.
    Override what you need::

        config = LoaderConfig(base_url="http://localhost:8081", strategy="race")
    """

    # Wire convention (must match the producer of loader modules)
    prefix: str = DEFAULT_PREFIX
    extension: str = DEFAULT_EXTENSION

    # Transport
    base_url: str = ""
    timeout: float | None = 30.0
    headers: tuple[tuple[str, str], ...] = ()

    # Orchestration: "sequential" or "race"
    strategy: str = "sequential"

    def __post_init__(self) -> None:
        if not self.prefix.startswith("/"):
            msg = f"Loader prefix must start with '/': {self.prefix!r}"
            raise ConfigurationError(msg)
        if self.prefix != "/" and self.prefix.endswith("/"):
            msg = f"Loader prefix must not end with '/': {self.prefix!r}"
            raise ConfigurationError(msg)
        if not self.extension.startswith(".") or len(self.extension) < 2:
            msg = f"Loader extension must look like '.js': {self.extension!r}"
            raise ConfigurationError(msg)
        if self.strategy not in STRATEGIES:
            msg = (
                f"Unknown fetch strategy: {self.strategy!r}. "
                f"Supported: {', '.join(sorted(STRATEGIES))}"
            )
            raise ConfigurationError(msg)
        if self.timeout is not None and self.timeout <= 0:
            msg = f"Timeout must be positive or None: {self.timeout!r}"
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoaderConfig:
        """Build a config from ``PERCH_*`` environment variables.

        Unset variables keep the dataclass defaults. ``PERCH_TIMEOUT=none``
        disables the transport timeout.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if "PERCH_LOADER_PREFIX" in env:
            kwargs["prefix"] = env["PERCH_LOADER_PREFIX"]
        if "PERCH_LOADER_EXTENSION" in env:
            kwargs["extension"] = env["PERCH_LOADER_EXTENSION"]
        if "PERCH_BASE_URL" in env:
            kwargs["base_url"] = env["PERCH_BASE_URL"]
        if "PERCH_STRATEGY" in env:
            kwargs["strategy"] = env["PERCH_STRATEGY"].strip().lower()
        if "PERCH_TIMEOUT" in env:
            raw = env["PERCH_TIMEOUT"].strip()
            if raw.lower() in ("", "none"):
                kwargs["timeout"] = None
            else:
                try:
                    kwargs["timeout"] = float(raw)
                except ValueError:
                    msg = f"PERCH_TIMEOUT must be a number or 'none': {raw!r}"
                    raise ConfigurationError(msg) from None

        return cls(**kwargs)  # type: ignore[arg-type]
