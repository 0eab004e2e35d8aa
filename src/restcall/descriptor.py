"""Call descriptor -- the value object describing one API call.

A :class:`CallDescriptor` is built either in one go::

    CallDescriptor("GET", "/users/1", endpoint_key="Acme")

or fluently::

    (
        CallDescriptor.builder("Acme")
        .with_method("PATCH")
        .with_path("/users/1")
        .with_body('{"name": "Bob"}')
        .with_header("X-Trace", "abc")
    )

Descriptors are mutable only until they are submitted. Executors and
schedulers call :meth:`CallDescriptor.freeze` on submission; from then on
every mutation attempt raises
:class:`~restcall.exceptions.FrozenDescriptorError` and concurrent reads are
safe because nothing changes anymore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Union

from restcall.exceptions import FrozenDescriptorError, ValidationError
from restcall.models import DEFAULT_HEADERS, DEFAULT_TIMEOUT_MS, HTTPMethod


def coerce_method(method: Union[HTTPMethod, str]) -> HTTPMethod:
    """Normalise *method* to an :class:`HTTPMethod`.

    Raises:
        ValidationError: If *method* is not one of the supported verbs.
    """
    if isinstance(method, HTTPMethod):
        return method
    try:
        return HTTPMethod(str(method).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in HTTPMethod)
        raise ValidationError(
            f"Unsupported HTTP method '{method}' (expected one of: {allowed})"
        ) from None


class FrozenHeaders(Mapping[str, str]):
    """Read-only view of a submitted descriptor's headers."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self._headers = dict(headers)

    def __getitem__(self, key: str) -> str:
        return self._headers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __setitem__(self, key: str, value: str) -> None:
        raise FrozenDescriptorError(f"Cannot set header '{key}' on a submitted descriptor")

    def __delitem__(self, key: str) -> None:
        raise FrozenDescriptorError(f"Cannot remove header '{key}' from a submitted descriptor")

    def __repr__(self) -> str:
        return f"FrozenHeaders({self._headers!r})"


@dataclass
class CallDescriptor:
    """Everything needed to perform one API call.

    Attributes:
        method: HTTP verb. Strings are accepted case-insensitively.
        path: Request path, not validated for well-formedness.
        query: Already-encoded query string, passed through verbatim. A
            leading ``?`` is stripped.
        body: Request body.
        headers: Default JSON headers overlaid by the caller's headers.
            Keys are compared by exact string, so differently cased keys
            are kept as distinct headers.
        endpoint_key: Name of the target endpoint, used by transports to
            route (live) or look up canned responses (mock).
        timeout_ms: Per-call timeout in milliseconds.
    """

    method: Union[HTTPMethod, str]
    path: str
    query: str = ""
    body: str = ""
    headers: Optional[Mapping[str, str]] = None
    endpoint_key: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.method = coerce_method(self.method)
        self.query = _strip_question_mark(self.query or "")
        self.body = self.body or ""
        merged = dict(DEFAULT_HEADERS)
        merged.update(self.headers or {})
        self.headers = merged

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenDescriptorError(
                f"Cannot set '{name}' on a submitted descriptor"
            )
        object.__setattr__(self, name, value)

    @classmethod
    def builder(cls, endpoint_key: str) -> CallDescriptor:
        """Start a blank GET descriptor bound to *endpoint_key*."""
        return cls(HTTPMethod.GET, "", endpoint_key=endpoint_key)

    # ------------------------------------------------------------------ #
    # Fluent mutators
    # ------------------------------------------------------------------ #

    def with_method(self, method: Union[HTTPMethod, str]) -> CallDescriptor:
        self._check_mutable()
        self.method = coerce_method(method)
        return self

    def with_path(self, path: str) -> CallDescriptor:
        self._check_mutable()
        self.path = path
        return self

    def with_query(self, query: str) -> CallDescriptor:
        self._check_mutable()
        self.query = _strip_question_mark(query or "")
        return self

    def with_body(self, body: str) -> CallDescriptor:
        self._check_mutable()
        self.body = body or ""
        return self

    def with_header(self, key: str, value: str) -> CallDescriptor:
        """Add or overwrite a single header."""
        self._check_mutable()
        self._headers_dict()[key] = value
        return self

    def with_headers(self, headers: Mapping[str, str]) -> CallDescriptor:
        """Merge *headers* in bulk; existing keys are overwritten."""
        self._check_mutable()
        self._headers_dict().update(headers)
        return self

    def with_timeout(self, timeout_ms: int) -> CallDescriptor:
        self._check_mutable()
        _check_timeout(timeout_ms)
        self.timeout_ms = timeout_ms
        return self

    def with_endpoint(self, endpoint_key: str) -> CallDescriptor:
        self._check_mutable()
        self.endpoint_key = endpoint_key
        return self

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    @property
    def is_frozen(self) -> bool:
        """Whether the descriptor has been submitted."""
        return self._frozen

    def validate(self) -> None:
        """Check that every required field is present.

        Raises:
            ValidationError: On an empty endpoint key, empty path, or a
                non-positive timeout.
        """
        if not self.endpoint_key:
            raise ValidationError("Call descriptor is missing an endpoint key")
        if not self.path:
            raise ValidationError("Call descriptor is missing a path")
        _check_timeout(self.timeout_ms)

    def freeze(self) -> CallDescriptor:
        """Mark the descriptor as submitted. Idempotent."""
        if not self._frozen:
            object.__setattr__(self, "headers", FrozenHeaders(self.headers or {}))
            object.__setattr__(self, "_frozen", True)
        return self

    def copy(self) -> CallDescriptor:
        """Return an unfrozen copy that can be modified and submitted again."""
        return CallDescriptor(
            method=self.method,
            path=self.path,
            query=self.query,
            body=self.body,
            headers=dict(self.headers or {}),
            endpoint_key=self.endpoint_key,
            timeout_ms=self.timeout_ms,
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FrozenDescriptorError("Cannot modify a submitted descriptor")

    def _headers_dict(self) -> dict[str, str]:
        assert isinstance(self.headers, dict)
        return self.headers


def _strip_question_mark(query: str) -> str:
    return query[1:] if query.startswith("?") else query


def _check_timeout(timeout_ms: Any) -> None:
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
        raise ValidationError(f"timeout_ms must be a positive integer, got {timeout_ms!r}")
