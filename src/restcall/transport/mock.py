"""Mock transport that replays scripted responses per endpoint key.

Tests register canned responses on a :class:`MockRegistry` and inject it
into a :class:`MockTransport`::

    registry = MockRegistry()
    registry.set_mock("Acme", 200, "OK", '{"id": 1}')
    executor = SyncExecutor(MockTransport(registry))

Two replay modes exist (see :class:`~restcall.models.MockMode`):

- ``REPEAT_LAST`` -- used by :meth:`MockRegistry.set_mock`; the same
  response is returned for any number of calls until reconfigured.
- ``CONSUME_ONE_PER_CALL`` -- used by :meth:`MockRegistry.set_mock_sequence`;
  responses come back in registration order, one per call, and the call
  after the last one fails with
  :class:`~restcall.exceptions.NoMockConfiguredError`.

The registry is the only shared mutable state in restcall. Every lookup
and consume happens under one lock, so concurrent executors never see a
half-consumed queue.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from restcall.exceptions import NoMockConfiguredError, ValidationError
from restcall.models import MockMode, TransportResponse, WireRequest
from restcall.transport.base import Transport

logger = logging.getLogger(__name__)


def generate_response(
    status_code: int,
    status: str,
    body: str = "",
    headers: Optional[Mapping[str, str]] = None,
) -> TransportResponse:
    """Build a :class:`~restcall.models.TransportResponse`.

    Args:
        status_code: HTTP status code, e.g. ``200``.
        status: Status text, e.g. ``"OK"``.
        body: Response body.
        headers: Response headers.
    """
    return TransportResponse(
        status_code=status_code,
        status=status,
        body=body,
        headers=dict(headers or {}),
    )


@dataclass
class _MockQueue:
    mode: MockMode
    responses: deque[TransportResponse] = field(default_factory=deque)


class MockRegistry:
    """Per-endpoint queues of canned responses.

    Create one per test (see :mod:`restcall.testing`) and call
    :meth:`reset` at the test boundary.
    """

    def __init__(self) -> None:
        self._queues: dict[str, _MockQueue] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def register(
        self,
        endpoint_key: str,
        responses: Iterable[TransportResponse],
        mode: MockMode,
    ) -> None:
        """Replace the queue for *endpoint_key* with *responses*.

        Raises:
            ValidationError: If *responses* is empty.
        """
        mode = MockMode(mode)
        items = deque(responses)
        if not items:
            raise ValidationError(f"No mock responses given for endpoint '{endpoint_key}'")
        with self._lock:
            self._queues[endpoint_key] = _MockQueue(mode=mode, responses=items)
        logger.debug(
            "Registered %d mock response(s) for '%s' (%s)", len(items), endpoint_key, mode.value
        )

    def set_mock(
        self,
        endpoint_key: str,
        status_code: int,
        status: str,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """Register a single response returned for every call.

        Returns:
            The registered response.
        """
        response = generate_response(status_code, status, body, headers)
        self.register(endpoint_key, [response], MockMode.REPEAT_LAST)
        return response

    def set_mock_sequence(
        self, endpoint_key: str, responses: Iterable[TransportResponse]
    ) -> None:
        """Register *responses* to be returned in order, one per call."""
        self.register(endpoint_key, responses, MockMode.CONSUME_ONE_PER_CALL)

    def append(self, endpoint_key: str, response: TransportResponse) -> None:
        """Add *response* to the end of the queue for *endpoint_key*.

        Creates a ``CONSUME_ONE_PER_CALL`` queue when none exists.
        """
        with self._lock:
            queue = self._queues.get(endpoint_key)
            if queue is None:
                queue = _MockQueue(mode=MockMode.CONSUME_ONE_PER_CALL)
                self._queues[endpoint_key] = queue
            queue.responses.append(response)

    def reset(self) -> None:
        """Forget every registered key and partially consumed queue."""
        with self._lock:
            self._queues.clear()

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def next_response(self, endpoint_key: str) -> TransportResponse:
        """Return the next canned response for *endpoint_key*.

        Raises:
            NoMockConfiguredError: If nothing is registered for the key or
                a consume-once sequence is exhausted.
        """
        with self._lock:
            queue = self._queues.get(endpoint_key)
            if queue is None:
                raise NoMockConfiguredError(endpoint_key)
            if queue.mode == MockMode.REPEAT_LAST:
                return queue.responses[-1]
            if not queue.responses:
                raise NoMockConfiguredError(endpoint_key, "mock responses exhausted")
            return queue.responses.popleft()

    def is_registered(self, endpoint_key: str) -> bool:
        with self._lock:
            return endpoint_key in self._queues

    def remaining(self, endpoint_key: str) -> int:
        """Number of responses left for *endpoint_key* (0 when unregistered)."""
        with self._lock:
            queue = self._queues.get(endpoint_key)
            return len(queue.responses) if queue is not None else 0


class MockTransport(Transport):
    """Transport that answers from a :class:`MockRegistry`.

    Every request received is recorded in :attr:`requests`, in order.
    """

    def __init__(self, registry: MockRegistry) -> None:
        self._registry = registry
        self._requests: list[WireRequest] = []
        self._requests_lock = threading.Lock()

    @property
    def registry(self) -> MockRegistry:
        return self._registry

    @property
    def requests(self) -> list[WireRequest]:
        """Snapshot of the requests sent through this transport."""
        with self._requests_lock:
            return list(self._requests)

    def send(self, request: WireRequest) -> TransportResponse:
        with self._requests_lock:
            self._requests.append(request)
        response = self._registry.next_response(request.endpoint_key)
        logger.debug(
            "Mock %s %s -> %d", request.method.value, request.full_path, response.status_code
        )
        return response
