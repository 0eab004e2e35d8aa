"""Exception hierarchy for restcall.

All exceptions inherit from :class:`RestcallError`. Callers on the
synchronous path catch :class:`TransportError` (or one of its subclasses)
to tell a failed exchange apart from a non-2xx response, which is returned
as data and never raised.

Subclass hierarchy::

    RestcallError
    +-- ValidationError
    +-- StateError
    |   +-- FrozenDescriptorError   (also a ValidationError)
    +-- TransportError
    |   +-- TimeoutError_
    |   +-- ConnectionError_
    |   +-- NoMockConfiguredError
    +-- FinalizerError
    +-- ConfigError
"""

from __future__ import annotations

from typing import Optional


class RestcallError(Exception):
    """Base exception for all restcall errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RestcallError):
    """Raised when a call descriptor is incomplete or otherwise invalid.

    Surfaced synchronously at build or submit time and never retried.
    """


class StateError(RestcallError):
    """Raised on an invalid state transition (e.g. finalizing a job twice)."""


class FrozenDescriptorError(ValidationError, StateError):
    """Raised when a descriptor is mutated after it was submitted.

    Inherits from both :class:`ValidationError` and :class:`StateError` so
    either can be used to catch it.
    """


class TransportError(RestcallError):
    """Raised when a request could not be exchanged with the endpoint at all.

    Covers timeouts, connection failures and mock misconfiguration. HTTP
    error statuses are *not* transport errors.

    Args:
        message: Human-readable error description.
        endpoint_key: The endpoint the failed request was routed to.
    """

    def __init__(self, message: str, endpoint_key: Optional[str] = None):
        super().__init__(message)
        self.endpoint_key = endpoint_key


class TimeoutError_(TransportError):
    """Raised when the transport gives up after the call's timeout.

    Named with a trailing underscore to avoid shadowing the built-in
    ``TimeoutError``.
    """


class ConnectionError_(TransportError):
    """Raised on network-level failures (DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """


class NoMockConfiguredError(TransportError):
    """Raised by the mock transport when no canned response is available.

    Either nothing was registered for the endpoint key or a consume-once
    sequence has been exhausted.
    """

    def __init__(self, endpoint_key: str, reason: str = "no mock response registered"):
        super().__init__(f"{reason} for endpoint '{endpoint_key}'", endpoint_key)


class FinalizerError(RestcallError):
    """Raised when a finalizer cannot be registered or resolved."""


class ConfigError(RestcallError):
    """Raised for configuration problems (missing endpoints, invalid JSON)."""
