"""Canonical Pydantic models shared across all restcall modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Wire models** -- produced and consumed by the execution path:
    :class:`HTTPMethod`, :class:`WireRequest`, :class:`TransportResponse`,
    :class:`MockMode`, and :class:`JobState`.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`EndpointConfig` and :class:`RestcallConfig`.

The call descriptor itself lives in :mod:`restcall.descriptor` because it
carries mutable builder state until it is frozen.
"""

from __future__ import annotations

import enum
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT_MS = 120_000
"""Default per-call timeout in milliseconds."""

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}
"""Headers every call starts from; caller headers override them by exact key."""


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a call descriptor may use. Closed set, no extension."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"


class MockMode(str, enum.Enum):
    """Replay strategy for a mock response queue.

    ``REPEAT_LAST`` returns the last registered response for every call.
    ``CONSUME_ONE_PER_CALL`` pops responses in registration order and fails
    once the queue is exhausted.
    """

    REPEAT_LAST = "repeat_last"
    CONSUME_ONE_PER_CALL = "consume_one_per_call"


class JobState(str, enum.Enum):
    """Lifecycle states of an :class:`~restcall.jobs.job.AsyncJob`."""

    QUEUED = "queued"
    EXECUTING = "executing"
    FAILED = "failed"
    FINALIZING = "finalizing"
    DONE = "done"


# --- Wire models ---


class WireRequest(BaseModel):
    """A rendered, transport-ready request.

    Produced by :func:`~restcall.request_builder.render_request`. The
    ``method`` is the method actually sent (PATCH is already tunnelled
    through POST at this point).
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    query: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    endpoint_key: str

    @property
    def full_path(self) -> str:
        """``path`` joined with ``query`` by ``?`` when the query is non-empty."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path


class TransportResponse(BaseModel):
    """A response as returned by any transport.

    Live, mock and dry-run transports all produce this shape so that
    downstream code stays transport-agnostic.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    status: str = ""
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status_code < 300

    def json_body(self) -> Any:
        """Decode the body as JSON.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON.
        """
        return json.loads(self.body)


# --- Configuration models ---


class EndpointConfig(BaseModel):
    """Connection details for one named endpoint.

    Credentials are not stored here; they belong to whatever resolver or
    transport the host application plugs in.
    """

    base_url: str = Field(description="Scheme and host (plus optional prefix) of the endpoint")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every call to this endpoint"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class RestcallConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/restcall/config.json``.

    Loaded and saved by :func:`~restcall.config.load_config` and
    :func:`~restcall.config.save_config`.
    """

    endpoints: dict[str, EndpointConfig] = Field(default_factory=dict)
    default_timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS, gt=0, description="Timeout for descriptors built by clients"
    )
