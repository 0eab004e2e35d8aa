"""Abstract transport capability.

A transport turns a :class:`~restcall.models.WireRequest` into a
:class:`~restcall.models.TransportResponse`. Any HTTP status, including
4xx and 5xx, is a successful exchange and comes back as a response. Only a
failure to exchange at all (timeout, connection failure, missing mock)
raises a :class:`~restcall.exceptions.TransportError`.

Implementations:

* :class:`~restcall.transport.mock.MockTransport` -- replays canned
  responses for tests.
* :class:`~restcall.transport.live.HttpxTransport` -- sends requests with
  :mod:`httpx`.
* :class:`~restcall.transport.dry_run.DryRunTransport` -- prints the
  request and returns a synthetic response.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from restcall.models import EndpointConfig, TransportResponse, WireRequest


class Transport(ABC):
    """Base class for all transports."""

    @abstractmethod
    def send(self, request: WireRequest) -> TransportResponse:
        """Exchange *request* with its endpoint.

        Args:
            request: The rendered request. ``request.endpoint_key`` selects
                the target.

        Returns:
            The endpoint's response, whatever its status code.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the transport. No-op by default."""


class EndpointResolver(Protocol):
    """Maps an endpoint key to its connection details.

    Raises :class:`~restcall.exceptions.ConfigError` for unknown keys.
    """

    def __call__(self, endpoint_key: str) -> EndpointConfig: ...
