"""Structured errors surfaced by a store-tester run.

Every failure a run can produce derives from :class:`StoreTesterError`. The
engine never raises these out of a directive: they end up in
``RunResult.error`` (or are raised from ``run()`` when ``throw_on_timeout`` is
set).
"""

from __future__ import annotations

from typing import Any


class StoreTesterError(Exception):
    """Base error for a failed run.

    Carries the underlying exception (if any) both as ``cause`` and as
    ``__cause__`` so tracebacks show the original failure.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause
        self.cause = cause

    def format_full(self) -> str:
        """Format the error together with its cause."""
        parts = [f"{type(self).__name__}: {self}"]
        if self.cause is not None:
            parts.append(f"\nCaused by: {type(self.cause).__name__}: {self.cause}")
        return "".join(parts)


class DirectiveTimeout(StoreTesterError):
    """A waiting directive was not satisfied within the error timeout.

    No distinction is made between a condition that never became true and a
    timer that expired first.
    """

    def __init__(self, kind: str, elapsed_ms: float, detail: str | None = None):
        self.kind = kind
        self.elapsed_ms = elapsed_ms
        self.detail = detail
        message = f"{kind} timed out after {elapsed_ms:.0f}ms"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ScriptAssertionFailure(StoreTesterError):
    """The script (or a predicate it handed over) raised an exception."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Script raised {type(cause).__name__}: {cause}", cause)


class UnresolvableCondition(StoreTesterError):
    """The script yielded something the interpreter cannot wait for."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Cannot resolve yielded value of type {type(value).__name__}: {value!r}\n"
            "Hint: yield a directive such as wait_for_action(...) or dispatch_action(...)"
        )


class InitializationFailure(StoreTesterError):
    """``initialize_function`` raised before the script could start."""

    def __init__(self, cause: BaseException):
        super().__init__(
            f"initialize_function raised {type(cause).__name__}: {cause}", cause
        )


__all__ = [
    "DirectiveTimeout",
    "InitializationFailure",
    "ScriptAssertionFailure",
    "StoreTesterError",
    "UnresolvableCondition",
]
