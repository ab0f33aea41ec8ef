"""
Exceptions raised by the harness core.

There is no database error type: the gateway turns DB failures into
"unavailable" / "empty result" signals and never raises to step code.
"""

from typing import Any

_MISSING = object()


class HarnessError(Exception):
    """Base exception for all harness errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(HarnessError):
    """
    Raised when configuration cannot be loaded or a required setting is missing.

    Examples:
    - Property file exists but is unreadable or not valid text
    - Base URL missing when a request is being built

    Fatal: no scenario can proceed without configuration.
    """

    pass


class ContextError(HarnessError):
    """
    Raised when a step needs a scenario context entry that was never set.

    Examples:
    - Asserting on a response before any request was sent
    - Sending a request before one was prepared
    """

    pass


class ValidationFailure(AssertionError):
    """
    A failed response/database assertion.

    Subclasses AssertionError so BDD runners report it as a test failure
    rather than an error. Carries the field (or JSON path) together with
    the expected and actual values.
    """

    def __init__(
        self,
        field: str,
        message: str | None = None,
        expected: Any = _MISSING,
        actual: Any = _MISSING,
    ):
        self.field = field
        self.expected = None if expected is _MISSING else expected
        self.actual = None if actual is _MISSING else actual
        if message is None:
            message = f"Field: {field}"
        if expected is not _MISSING or actual is not _MISSING:
            message = f"{message} expected {self.expected!r} but was {self.actual!r}"
        self.message = message
        super().__init__(message)
