"""Engine configuration."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field

from store_tester.types import InitializeFunction, InitStore

ERROR_TIMEOUT_ENV_KEY = "STORE_TESTER_ERROR_TIMEOUT_MS"
DEFAULT_ERROR_TIMEOUT_MS = 1000.0

# Environment variable to trace directives at INFO instead of DEBUG
DEBUG_TRACE = os.environ.get("STORE_TESTER_DEBUG", "").lower() in ("1", "true", "yes")


def default_error_timeout_ms() -> float:
    raw = os.environ.get(ERROR_TIMEOUT_ENV_KEY)
    if raw is None or not raw.strip():
        return DEFAULT_ERROR_TIMEOUT_MS
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{ERROR_TIMEOUT_ENV_KEY} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class StoreTesterConfig:
    """Options recognised by :class:`store_tester.StoreTester`.

    Args:
        init_store: Factory receiving the action recorder and returning the
            store handle, with the recorder wired into every dispatch.
        error_timeout_ms: Failure budget, re-armed for each waiting directive.
        throw_on_timeout: Raise the captured error from ``run()`` instead of
            returning it in ``RunResult.error``.
        initialize_function: Called once with the store before the script
            starts; may return a teardown callable.
    """

    init_store: InitStore
    error_timeout_ms: float = field(default_factory=default_error_timeout_ms)
    throw_on_timeout: bool = False
    initialize_function: InitializeFunction | None = None

    def __post_init__(self) -> None:
        if not callable(self.init_store):
            raise TypeError(f"init_store must be callable, got {type(self.init_store).__name__}")
        if self.initialize_function is not None and not callable(self.initialize_function):
            raise TypeError(
                "initialize_function must be callable, "
                f"got {type(self.initialize_function).__name__}"
            )
        timeout = self.error_timeout_ms
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise TypeError(f"error_timeout_ms must be float, got {type(timeout).__name__}")
        if math.isnan(timeout) or math.isinf(timeout) or timeout <= 0:
            raise ValueError(f"error_timeout_ms must be finite and positive, got {timeout!r}")
        object.__setattr__(self, "error_timeout_ms", float(timeout))

    @property
    def error_timeout_seconds(self) -> float:
        return self.error_timeout_ms / 1000.0


__all__ = [
    "DEFAULT_ERROR_TIMEOUT_MS",
    "ERROR_TIMEOUT_ENV_KEY",
    "StoreTesterConfig",
    "default_error_timeout_ms",
]
